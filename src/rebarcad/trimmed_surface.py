"""Parametrizing four-sided trimmed surfaces by their boundary.

A :class:`TrimmedSurface` sorts the perimeter curves of a surface into
direction buckets.  Curves whose directions are parallel (or
anti-parallel) within the angle tolerance land in the same bucket, and
every bucket holds a :class:`CurvePair`, the two opposite sides of the
surface running in that direction.  Contiguous curves on one side are
joined into a polycurve.

Once the sides are known, :meth:`TrimmedSurface.get_curve_at_parameter`
interpolates a curve across the surface between matching points on the
two opposite sides of the first (or, flipped, the last) bucket.
"""

import logging

from rebarcad.curves import (closest_point, end_point, is_curved, polycurve,
                             sample, start_point)
from rebarcad.errors import DegenerateGeometryError, ParametrizationError, PreconditionError
from rebarcad.geom import angle_between, arc3p, dist, epsilon, sub, vclose
from rebarcad.surfaces import issurface, perimeter_curves

logger = logging.getLogger(__name__)

DEFAULT_ANGLE_TOLERANCE = 60.0

## endpoint matching tolerance
JOIN_TOLERANCE = 1e-6


def is_parallel(a, b, tolerance):
    """Are directions ``a`` and ``b`` parallel or anti-parallel within
    ``tolerance`` degrees?"""
    angle = angle_between(a, b)
    return angle <= tolerance or 180.0 - angle <= tolerance


class CurvePair(object):
    """Two curves on opposite sides of a surface.

    ``curve2`` stays ``None`` until a second, unconnected curve arrives.
    Curves that connect to neither side are kept in ``undefined``.
    """

    def __init__(self, curve1):
        self.curve1 = curve1
        self.curve2 = None
        self.undefined = []

    def __repr__(self):
        return 'CurvePair(curve1={!r}, curve2={!r})'.format(
            self.curve1[0] if self.curve1 else None,
            self.curve2[0] if self.curve2 else None)

    @staticmethod
    def _join(existing, curve):
        if vclose(start_point(existing), end_point(curve), JOIN_TOLERANCE):
            return polycurve([curve, existing])
        return polycurve([existing, curve])

    @staticmethod
    def _connects(existing, curve):
        return vclose(start_point(existing), end_point(curve), JOIN_TOLERANCE) or \
            vclose(end_point(existing), start_point(curve), JOIN_TOLERANCE)

    def add_to_matching_curve(self, curve):
        """Join ``curve`` onto the side it connects to, or make it the
        second side.

        Raises ``ParametrizationError`` when both sides are taken and
        ``curve`` connects to neither.
        """
        if self._connects(self.curve1, curve):
            self.curve1 = self._join(self.curve1, curve)
        elif self.curve2 is not None and self._connects(self.curve2, curve):
            self.curve2 = self._join(self.curve2, curve)
        elif self.curve2 is None:
            self.curve2 = curve
        else:
            self.undefined.append(curve)
            raise ParametrizationError(curves=list(self.undefined))

    def are_endpoints(self, a, b):
        """Are ``a`` and ``b`` both endpoints of the same curve?"""
        for c in (self.curve1, self.curve2):
            if c is None:
                continue
            ends = (start_point(c), end_point(c))
            if any(vclose(a, e, JOIN_TOLERANCE) for e in ends) and \
                    any(vclose(b, e, JOIN_TOLERANCE) for e in ends):
                return True
        return False


class TrimmedSurface(object):
    """A surface whose perimeter has been sorted into opposite sides.

    ``curve_pairs`` is the list of ``(direction, CurvePair)`` buckets in
    the order their first curve appears on the perimeter.
    """

    def __init__(self, surface, angle_tolerance=DEFAULT_ANGLE_TOLERANCE):
        if surface is None or not issurface(surface):
            raise PreconditionError('TrimmedSurface needs a surface')
        self.surface = surface
        self.tolerance = float(angle_tolerance)
        self.curve_pairs = []

        for curve in perimeter_curves(surface):
            direction = sub(end_point(curve), start_point(curve))
            matched = False
            for key, pair in self.curve_pairs:
                if is_parallel(direction, key, self.tolerance):
                    matched = True
                    pair.add_to_matching_curve(curve)
            if not matched:
                logger.debug('new side bucket %d', len(self.curve_pairs))
                self.curve_pairs.append((direction, CurvePair(curve)))

    def _create_curve(self, compare, a, b, parameter, refpoint):
        if is_curved(compare.curve1) or is_curved(compare.curve2):
            mid = [sample(compare.curve1, 0.5), sample(compare.curve2, 0.5)]
            # refpoint on the second curve means the midline runs the other way
            if dist(closest_point(compare.curve1, refpoint), refpoint) > epsilon:
                parameter = 1.0 - parameter
            try:
                return arc3p(a, sample(mid, parameter), b)
            except DegenerateGeometryError:
                logger.debug('collinear arc points, using a line')
        return [a, b]

    def get_curve_at_parameter(self, parameter, flip=False):
        """Curve across the surface at ``parameter`` along its sides.

        The curve joins the points at ``parameter`` on the two sides of
        the first bucket (the last one when ``flip``).  It is an arc
        when the sides of the other bucket are curved, a line otherwise.
        """
        if len(self.curve_pairs) < 2:
            raise ParametrizationError('Cannot parametrize surface with fewer than two sides.')
        data = self.curve_pairs[0][1]
        compare = self.curve_pairs[-1][1]
        if flip:
            data, compare = compare, data
        if data.curve2 is None or compare.curve2 is None:
            raise ParametrizationError('Cannot parametrize surface, a side has no opposite.')

        a = start_point(data.curve1)
        b = start_point(data.curve2)
        a_sync = sample(data.curve1, parameter)
        # opposite sides normally run in opposite directions
        b_sync = sample(data.curve2, 1.0 - parameter)
        if compare.are_endpoints(a, b):
            b_sync = sample(data.curve2, parameter)
        return self._create_curve(compare, a_sync, b_sync, parameter, a)


def parametrize(surface, tolerance=DEFAULT_ANGLE_TOLERANCE):
    """sort the perimeter of ``surface`` into opposite sides"""
    return TrimmedSurface(surface, tolerance)


__all__ = [
    'DEFAULT_ANGLE_TOLERANCE',
    'is_parallel',
    'CurvePair',
    'TrimmedSurface',
    'parametrize',
]
