"""Morphing between two curves.

:func:`morph` builds a matrix of construction-line samples between two
curves and fits new curves through its transposed columns, giving a
family of curves that blends smoothly from the first input to the
second.

How the second curve is oriented relative to the first is decided by an
alignment strategy, a callable ``align(points_a, points_b) -> points_b``
that returns the second curve's samples in the order that matches the
first.  Two strategies are provided:

``endpoint_alignment``
    compares the start of ``A`` with both ends of ``B`` and reverses
    ``B`` when its end is nearer.

``paired_distance_alignment``
    sums the distances between paired samples for both orientations of
    ``B`` and keeps the cheaper one.  More robust for curves whose
    endpoints alone are ambiguous.
"""

import logging

from rebarcad.curves import iscurve, translate
from rebarcad.errors import PreconditionError
from rebarcad.geom import dist, scale3
from rebarcad.sampling import divide, transpose
from rebarcad.spline import interpolate_nurbs
from rebarcad.surfaces import loft_surface, surface_normal

logger = logging.getLogger(__name__)

DEFAULT_PRECISION = 10


def endpoint_alignment(points_a, points_b):
    """Reverse ``points_b`` when its last point is nearer the start of
    ``points_a`` than its first point is"""
    start = points_a[0]
    if dist(start, points_b[-1]) < dist(start, points_b[0]):
        logger.debug('reversing second curve to match the first')
        return list(reversed(points_b))
    return list(points_b)


def paired_distance_alignment(points_a, points_b):
    """Pick the orientation of ``points_b`` with the smallest summed
    distance to the paired samples of ``points_a``"""
    forward = sum(dist(a, b) for a, b in zip(points_a, points_b))
    backward = sum(dist(a, b) for a, b in zip(points_a, reversed(points_b)))
    if backward < forward:
        logger.debug('reversing second curve, paired distance %g < %g', backward, forward)
        return list(reversed(points_b))
    return list(points_b)


def morph_matrix(curve_a, curve_b, count, precision=DEFAULT_PRECISION,
                 align=endpoint_alignment):
    """Sample matrix of the construction lines between two curves.

    Row ``i`` holds the ``count + 2`` points dividing the straight line
    from the ``i``-th sample of ``curve_a`` to the matching sample of
    ``curve_b``; there are ``precision + 1`` rows.
    """
    points_a = divide(curve_a, precision)
    points_b = align(points_a, divide(curve_b, precision))
    return [divide([a, b], count + 1) for a, b in zip(points_a, points_b)]


def morph(curve_a, curve_b, count, precision=DEFAULT_PRECISION, offset=0.0, *,
          align=endpoint_alignment, include_ends=False, fit=interpolate_nurbs):
    """Curves blending from ``curve_a`` to ``curve_b``.

    Parameters
    ----------
    curve_a, curve_b : curve
        The two boundary curves.
    count : int
        Number of interior curves to create.
    precision : int
        Number of divisions along the boundary curves; each new curve
        is fitted through ``precision + 1`` points.
    offset : float
        Distance to move every curve along the normal of the ruled
        surface between the inputs, measured at its centre.
    align : callable
        Orientation strategy for ``curve_b``.
    include_ends : bool
        Also return the two boundary slices, which coincide with the
        inputs.
    fit : callable
        Builds a curve from a list of points.

    Returns
    -------
    list
        ``count`` curves, or ``count + 2`` with ``include_ends``.
    """
    if curve_a is None or curve_b is None:
        raise PreconditionError('morph needs two curves')
    if not iscurve(curve_a) or not iscurve(curve_b):
        raise PreconditionError('morph needs two curves')
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise PreconditionError('morph count must be an integer >= 1, got {!r}'.format(count))
    if isinstance(precision, bool) or not isinstance(precision, int) or precision < 1:
        raise PreconditionError('morph precision must be an integer >= 1, got {!r}'.format(precision))

    columns = transpose(morph_matrix(curve_a, curve_b, count, precision, align))
    if not include_ends:
        columns = columns[1:-1]

    delta = None
    if offset:
        # a loft between coincident curves has no normal; only ask when needed
        normal = surface_normal(loft_surface(curve_a, curve_b), 0.5, 0.5)
        delta = scale3(normal, offset)

    curves = []
    for column in columns:
        c = fit(column)
        if delta is not None:
            c = translate(c, delta)
        curves.append(c)
    logger.debug('morphed %d curves at precision %d', len(curves), precision)
    return curves


__all__ = [
    'DEFAULT_PRECISION',
    'endpoint_alignment',
    'paired_distance_alignment',
    'morph_matrix',
    'morph',
]
