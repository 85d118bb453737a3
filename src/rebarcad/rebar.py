"""Rebar nodes.

The functions here are the entry points a visual programming host wraps
as nodes.  They fix the defaults the nodes have always used, such as a
morphing and following precision of 50, and add the small curve
utilities (shortening, cutting, cover) that sit around the generators.
"""

import logging

from rebarcad.bartypes import BarType, get_bar_type
from rebarcad.curves import iscurve, length, parameter_at_length, segment, split
from rebarcad.errors import PreconditionError
from rebarcad.follow import follow, follow_trimmed
from rebarcad.geom import epsilon, isarc, isline
from rebarcad.morph import morph
from rebarcad.normal_curves import normal_curves
from rebarcad.surfaces import intersect_curve_surface, issurface

logger = logging.getLogger(__name__)

## sampling precision used by the nodes
NODE_PRECISION = 50


def morphed(from_curve, to_curve, count, offset=0.0):
    """``count`` curves morphing from one curve to another"""
    return morph(from_curve, to_curve, count, NODE_PRECISION, offset)


def perpendicular(face, boundary, height, count, flip=True, offset=0.0):
    """``count`` curves normal to ``face``, bounded by the ``boundary``
    surfaces; ``flip`` selects the sweep direction"""
    return normal_curves(face, boundary, count, offset, height, horizontal=flip)


def following_surface(face, count=0, spacing=0.0, flip=True, offset=0.0, idealize=True,
                      include_first_edge=False, include_last_edge=False):
    """Curves following ``face``.

    ``idealize`` samples the surface's parameter square; otherwise the
    curves are interpolated between the sides of the trimmed outline and
    the two edges may be included.
    """
    if idealize:
        return follow(face, NODE_PRECISION, offset, spacing, count, flip)
    return follow_trimmed(face, offset, spacing, count, flip,
                          include_first_edge, include_last_edge)


def shorten(curves, length_to_remove):
    """Trim ``length_to_remove`` off both ends of every curve.

    A negative length extends lines and arcs instead.
    """
    if curves is None:
        raise PreconditionError('shorten needs a list of curves')
    result = []
    for c in curves:
        if not iscurve(c):
            raise PreconditionError('shorten needs a list of curves')
        L = length(c)
        if 2.0 * length_to_remove >= L:
            raise PreconditionError(
                'cannot shorten a curve of length {:g} by {:g} at each end'.format(L, length_to_remove))
        if length_to_remove < 0.0 and not (isline(c) or isarc(c)):
            raise PreconditionError('only lines and arcs can be extended')
        u0 = parameter_at_length(c, length_to_remove)
        u1 = parameter_at_length(c, L - length_to_remove)
        result.append(segment(c, u0, u1))
    return result


def cut(curves, plane, first_part=True):
    """Split every curve where it crosses the surface ``plane``.

    Each crossing yields the part before it (``first_part``) or the part
    after it.  Curves that do not cross the surface are dropped.
    """
    if curves is None:
        raise PreconditionError('cut needs a list of curves')
    if plane is None or not issurface(plane):
        raise PreconditionError('cut needs a cutting surface')
    result = []
    for c in curves:
        if not iscurve(c):
            raise PreconditionError('cut needs a list of curves')
        for t, _ in intersect_curve_surface(c, plane):
            if t <= epsilon or t >= 1.0 - epsilon:
                continue
            first, second = split(c, t)
            result.append(first if first_part else second)
    logger.debug('cut %d curves into %d parts', len(curves), len(result))
    return result


def _bar_type(bar_type, catalog='metric'):
    if isinstance(bar_type, BarType):
        return bar_type
    return get_bar_type(bar_type, catalog)


def cover_to_offset(cover, bar_type=None, catalog='metric'):
    """offset of the bar axis for a concrete ``cover``: the cover plus
    half the bar diameter"""
    if bar_type is None:
        return cover
    return cover + _bar_type(bar_type, catalog).diameter / 2.0


def rebar_type_properties(bar_type, catalog='metric'):
    """BarDiameter, StandardBendDiameter, StandardHookBendDiameter and
    StirrupTieBendDiameter of a bar type"""
    return _bar_type(bar_type, catalog).properties()


__all__ = [
    'NODE_PRECISION',
    'morphed',
    'perpendicular',
    'following_surface',
    'shorten',
    'cut',
    'cover_to_offset',
    'rebar_type_properties',
]
