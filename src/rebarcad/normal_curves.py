"""Curves normal to a surface, bounded by other surfaces.

:func:`normal_curves` places points along a line of constant parameter
on a base surface, shoots a ray along the surface normal from each
point and keeps the part of the ray enclosed by the boundary surfaces.
Positions whose ray meets no boundary in either direction produce no
curve; they are logged and skipped rather than treated as errors.
"""

import logging

from rebarcad.curves import length, segment, split
from rebarcad.errors import PreconditionError
from rebarcad.geom import add, close, line_by_direction, reverse_vector, scale3
from rebarcad.sampling import remove_duplicates
from rebarcad.surfaces import (evaluate_surface, intersect_curve_surface,
                               issurface, surface_normal)

logger = logging.getLogger(__name__)

## length of the ray standing in for an unbounded half line
RAY_LENGTH = 1e8


def sweeps_along_u(surface, height, horizontal=True):
    """Does the sweep run along ``u`` (at ``v = height``)?

    ``u`` is assumed to follow the Y direction unless the line at
    ``height`` has constant X, and ``horizontal=False`` inverts the
    choice.
    """
    along_u = True
    if close(evaluate_surface(surface, 0.0, height)[0],
             evaluate_surface(surface, 1.0, height)[0]):
        along_u = False
    if not horizontal:
        along_u = not along_u
    return along_u


def ray_intersections(ray, boundaries):
    """sorted, de-duplicated ray parameters where ``ray`` meets the
    boundary surfaces"""
    params = []
    for surf in boundaries:
        params.extend(t for t, _ in intersect_curve_surface(ray, surf))
    params.sort()
    return remove_duplicates(params)


def bounded_segments(ray, params):
    """pieces of ``ray`` enclosed by the intersection parameters.

    With two or more parameters the ray is cut at every parameter and
    the even pieces are kept, except a last piece running out to the
    end of the ray.  A single parameter keeps the piece before it.
    """
    if len(params) >= 2:
        cuts = [0.0] + list(params) + [1.0]
        pieces = []
        for k in range(0, len(cuts) - 1, 2):
            if k + 1 == len(cuts) - 1:
                # runs out to the far end of the ray, so not bounded
                continue
            pieces.append(segment(ray, cuts[k], cuts[k + 1]))
        return pieces
    elif len(params) == 1:
        return [split(ray, params[0])[0]]
    return []


def _cast(surface, boundaries, uv, offset, reverse=False):
    normal = surface_normal(surface, uv[0], uv[1])
    if reverse:
        normal = reverse_vector(normal)
    start = evaluate_surface(surface, uv[0], uv[1])
    if offset:
        start = add(start, scale3(normal, offset))
    ray = line_by_direction(start, normal, RAY_LENGTH)
    params = ray_intersections(ray, boundaries)
    return bounded_segments(ray, params), len(params)


def normal_curves(surface, boundaries, count, offset=0.0, height=0.5, horizontal=True):
    """Curves along the normals of ``surface`` up to the ``boundaries``.

    Parameters
    ----------
    surface : surface
        Base surface the curves start from.
    boundaries : list
        Surfaces limiting the length of each curve.
    count : int
        Number of sample positions, placed at ``i / (count + 1)``.
    offset : float
        Cover: distance moved off the base surface at the start and
        trimmed from the far end of each curve.
    height : float
        Parameter of the line the positions are placed along.
    horizontal : bool
        Sweep direction, see :func:`sweeps_along_u`.

    Returns
    -------
    list
        One curve per bounded piece found; positions with no boundary
        hit contribute nothing.
    """
    if surface is None or not issurface(surface):
        raise PreconditionError('normal_curves needs a base surface')
    if not isinstance(boundaries, (list, tuple)) or not boundaries:
        raise PreconditionError('normal_curves needs a non-empty list of boundary surfaces')
    for b in boundaries:
        if not issurface(b):
            raise PreconditionError('every boundary must be a surface')
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise PreconditionError('normal curve count must be an integer >= 1, got {!r}'.format(count))

    along_u = sweeps_along_u(surface, height, horizontal)
    divisions = count + 1
    uvs = []
    for i in range(1, divisions):
        t = i / divisions
        uvs.append((t, height) if along_u else (height, t))

    found = []
    for uv in uvs:
        pieces, hits = _cast(surface, boundaries, uv, offset)
        if hits == 0:
            pieces, hits = _cast(surface, boundaries, uv, offset, reverse=True)
        if hits == 0:
            logger.debug('no boundary along the normal at uv=(%.4g, %.4g), skipped', *uv)
        found.extend(pieces)

    curves = []
    for c in found:
        if not offset:
            curves.append(c)
            continue
        L = length(c)
        if L <= offset:
            logger.debug('normal curve of length %g is shorter than the cover %g, dropped', L, offset)
            continue
        curves.append(segment(c, 0.0, (L - offset) / L))
    return curves


__all__ = [
    'RAY_LENGTH',
    'sweeps_along_u',
    'ray_intersections',
    'bounded_segments',
    'normal_curves',
]
