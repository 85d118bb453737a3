"""Families of curves following a surface.

Two ways of laying curves over a surface are provided.  :func:`follow`
works on the idealized parameter square: every curve is a line of
constant ``v`` (or ``u`` when flipped) traced on the surface and fitted
with a NURBS curve.  :func:`follow_trimmed` asks a
:class:`~rebarcad.trimmed_surface.TrimmedSurface` for the curves
instead, which follows the actual outline of trimmed faces.

The number of curves is either given directly or derived from a
desired spacing along the reference edge of the surface.
"""

import logging

from rebarcad.curves import surface_line
from rebarcad.errors import PreconditionError
from rebarcad.geom import dist
from rebarcad.morph import DEFAULT_PRECISION
from rebarcad.sampling import divide
from rebarcad.spline import interpolate_nurbs
from rebarcad.surfaces import evaluate_surface, issurface, offset_surface
from rebarcad.trimmed_surface import DEFAULT_ANGLE_TOLERANCE, TrimmedSurface

logger = logging.getLogger(__name__)


def reference_length(surface, flip=False):
    """distance between the corners spanning the direction the curves
    are spaced along

    Unflipped curves run along ``u`` and are spaced along ``v``, so the
    reference is S(0,0)-S(0,1), as in :func:`follow_trimmed`.  Earlier
    idealized followers measured S(0,0)-S(1,0) here.
    """
    if flip:
        return dist(evaluate_surface(surface, 0.0, 0.0), evaluate_surface(surface, 1.0, 0.0))
    return dist(evaluate_surface(surface, 0.0, 0.0), evaluate_surface(surface, 0.0, 1.0))


def division_count(length, spacing=0.0, count=0):
    """number of divisions for a spacing or an explicit count"""
    if spacing > 0.0:
        divisions = int(length / spacing)
        if divisions < 1:
            raise PreconditionError(
                'spacing {:g} is larger than the surface extent {:g}'.format(spacing, length))
        return divisions
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise PreconditionError('give a spacing > 0 or a curve count >= 1, got {!r}'.format(count))
    return count


def _check_surface(surface):
    if surface is None or not issurface(surface):
        raise PreconditionError('a surface to follow is required')


def follow(surface, precision=DEFAULT_PRECISION, offset=0.0, spacing=0.0, count=0, flip=False):
    """Interior curves across the idealized surface.

    The surface is first offset by ``offset``.  With ``divisions``
    from :func:`division_count`, the ``divisions - 1`` curves sit at
    heights ``j / divisions`` and run from ``(0, h)`` to ``(1, h)`` in
    parameter space, or from ``(h, 0)`` to ``(h, 1)`` when ``flip``.
    Each is fitted through ``precision + 1`` points.
    """
    _check_surface(surface)
    if isinstance(precision, bool) or not isinstance(precision, int) or precision < 1:
        raise PreconditionError('follow precision must be an integer >= 1, got {!r}'.format(precision))
    face = offset_surface(surface, offset) if offset else surface
    divisions = division_count(reference_length(face, flip), spacing, count)

    curves = []
    for j in range(1, divisions):
        h = j / divisions
        if flip:
            trace = surface_line(face, (h, 0.0), (h, 1.0))
        else:
            trace = surface_line(face, (0.0, h), (1.0, h))
        curves.append(interpolate_nurbs(divide(trace, precision)))
    logger.debug('follow: %d divisions, %d curves', divisions, len(curves))
    return curves


def follow_trimmed(surface, offset=0.0, spacing=0.0, count=0, flip=False,
                   include_first_edge=False, include_last_edge=False,
                   angle_tolerance=DEFAULT_ANGLE_TOLERANCE):
    """Curves across a trimmed surface, following its sides.

    The division count is derived from the untrimmed surface; the
    curves come from :meth:`TrimmedSurface.get_curve_at_parameter` on
    the offset surface.  The two edges (parameters 0 and 1) can be
    included on request.
    """
    _check_surface(surface)
    divisions = division_count(reference_length(surface, flip), spacing, count)
    face = offset_surface(surface, offset) if offset else surface
    trimmed = TrimmedSurface(face, angle_tolerance)

    curves = []
    if include_first_edge:
        curves.append(trimmed.get_curve_at_parameter(0.0, flip))
    for j in range(1, divisions):
        curves.append(trimmed.get_curve_at_parameter(j / divisions, flip))
    if include_last_edge:
        curves.append(trimmed.get_curve_at_parameter(1.0, flip))
    return curves


__all__ = [
    'reference_length',
    'division_count',
    'follow',
    'follow_trimmed',
]
