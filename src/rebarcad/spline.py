"""NURBS curves for rebarCAD.

Curves are stored the yapCAD way, as ``['nurbs', control_points, meta]``
where ``meta`` carries the ``degree``, the full ``knots`` vector and the
per-control-point ``weights``.  Evaluation is normalized so that
``u = 0`` is the start of the curve and ``u = 1`` its end, whatever the
underlying knot range is.

:func:`interpolate_nurbs` is the curve fitting workhorse: every morphed
and follow curve is produced by threading a cubic through sampled points.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from rebarcad.errors import PreconditionError
from rebarcad.geom import add, dist, point


def _clamped_knots(count: int, degree: int) -> List[float]:
    interior = count - degree - 1
    knots = [0.0] * (degree + 1)
    for j in range(1, interior + 1):
        knots.append(j / (interior + 1))
    knots.extend([1.0] * (degree + 1))
    return knots


def nurbs(ctrl, degree: int = 3, knots=None, weights=None) -> list:
    """Make a NURBS curve from control points.

    The degree is reduced to ``len(ctrl) - 1`` when there are too few
    control points for the requested degree.  When ``knots`` is omitted
    a clamped uniform knot vector is generated; when ``weights`` is
    omitted every weight is 1.
    """

    pts = [point(p) for p in ctrl]
    if len(pts) < 2:
        raise PreconditionError('a NURBS curve needs at least 2 control points')
    degree = int(degree)
    if degree < 1:
        raise PreconditionError('NURBS degree must be >= 1')
    degree = min(degree, len(pts) - 1)
    if knots is None:
        knots = _clamped_knots(len(pts), degree)
    else:
        knots = [float(k) for k in knots]
        if len(knots) != len(pts) + degree + 1:
            raise PreconditionError(
                'expected {} knots, got {}'.format(len(pts) + degree + 1, len(knots)))
        if any(b < a for a, b in zip(knots, knots[1:])):
            raise PreconditionError('knot vector must be non-decreasing')
    if weights is None:
        weights = [1.0] * len(pts)
    else:
        weights = [float(w) for w in weights]
        if len(weights) != len(pts):
            raise PreconditionError('one weight per control point is required')
        if any(w <= 0.0 for w in weights):
            raise PreconditionError('NURBS weights must be positive')
    return ['nurbs', pts, {'degree': degree, 'knots': knots, 'weights': weights}]


def isnurbs(curve) -> bool:
    """Return ``True`` if *curve* is a NURBS definition."""

    return isinstance(curve, list) and len(curve) == 3 and curve[0] == 'nurbs'


def _find_span(n: int, degree: int, u: float, knots: Sequence[float]) -> int:
    if u >= knots[n + 1]:
        return n
    if u <= knots[degree]:
        return degree
    low = degree
    high = n + 1
    mid = (low + high) // 2
    while u < knots[mid] or u >= knots[mid + 1]:
        if u < knots[mid]:
            high = mid
        else:
            low = mid
        mid = (low + high) // 2
    return mid


def _basis_functions(span: int, u: float, degree: int, knots: Sequence[float]) -> List[float]:
    # the degree + 1 non-vanishing basis functions on ``span``
    basis = [1.0] + [0.0] * degree
    left = [0.0] * (degree + 1)
    right = [0.0] * (degree + 1)
    for j in range(1, degree + 1):
        left[j] = u - knots[span + 1 - j]
        right[j] = knots[span + j] - u
        saved = 0.0
        for r in range(j):
            denom = right[r + 1] + left[j - r]
            temp = basis[r] / denom if denom != 0.0 else 0.0
            basis[r] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        basis[j] = saved
    return basis


def _domain(curve):
    meta = curve[2]
    degree = meta['degree']
    knots = meta['knots']
    return knots[degree], knots[len(knots) - degree - 1]


def evaluate_nurbs(curve, u: float) -> list:
    """Evaluate a NURBS curve at parameter ``u`` in ``[0, 1]``."""

    if not isnurbs(curve):
        raise ValueError('curve is not a NURBS definition')
    _, ctrl, meta = curve
    degree = meta['degree']
    knots = meta['knots']
    weights = meta['weights']
    u_start, u_end = _domain(curve)
    u_clamped = max(0.0, min(1.0, float(u)))
    real_u = u_start + (u_end - u_start) * u_clamped

    n = len(ctrl) - 1
    span = _find_span(n, degree, real_u, knots)
    basis = _basis_functions(span, real_u, degree, knots)
    x = y = z = 0.0
    denominator = 0.0
    for k in range(degree + 1):
        i = span - degree + k
        w = weights[i] * basis[k]
        x += w * ctrl[i][0]
        y += w * ctrl[i][1]
        z += w * ctrl[i][2]
        denominator += w
    if denominator == 0.0:
        return point(ctrl[0])
    return point(x / denominator, y / denominator, z / denominator)


def sample_nurbs(curve, *, samples: int = 64) -> List[list]:
    """Sample a NURBS curve into :func:`point` values."""

    if samples < 2:
        raise ValueError('samples must be >= 2')
    if not isnurbs(curve):
        raise ValueError('curve is not a NURBS definition')
    return [evaluate_nurbs(curve, i / (samples - 1)) for i in range(samples)]


def nurbs_by_control_points(points, degree: int = 3) -> list:
    """NURBS curve using ``points`` directly as its control polygon"""
    return nurbs(points, degree=degree)


def _chord_parameters(pts) -> List[float]:
    chords = [dist(a, b) for a, b in zip(pts, pts[1:])]
    total = sum(chords)
    n = len(pts) - 1
    if total < 1e-12 or min(chords) < 1e-12:
        return [i / n for i in range(n + 1)]
    params = [0.0]
    acc = 0.0
    for c in chords[:-1]:
        acc += c
        params.append(acc / total)
    params.append(1.0)
    return params


def interpolate_nurbs(points, degree: int = 3) -> list:
    """Fit a NURBS curve that passes through every point in ``points``.

    Global interpolation with chord-length parameters and averaged
    knots.  Two points produce a degree one curve (a straight line);
    coincident neighbours fall back to uniform parameters.
    """

    pts = [point(p) for p in points]
    if len(pts) < 2:
        raise PreconditionError('curve fitting needs at least 2 points')
    n = len(pts) - 1
    degree = min(int(degree), n)
    if degree < 1:
        raise PreconditionError('NURBS degree must be >= 1')

    params = _chord_parameters(pts)
    knots = [0.0] * (degree + 1)
    for j in range(1, n - degree + 1):
        knots.append(sum(params[j:j + degree]) / degree)
    knots.extend([1.0] * (degree + 1))

    matrix = np.zeros((n + 1, n + 1))
    for row, u in enumerate(params):
        span = _find_span(n, degree, u, knots)
        basis = _basis_functions(span, u, degree, knots)
        for k in range(degree + 1):
            matrix[row, span - degree + k] = basis[k]
    rhs = np.array([[p[0], p[1], p[2]] for p in pts])
    solved = np.linalg.solve(matrix, rhs)
    ctrl = [point(float(r[0]), float(r[1]), float(r[2])) for r in solved]
    return nurbs(ctrl, degree=degree, knots=knots)


def reverse_nurbs(curve) -> list:
    """the same NURBS curve traversed from end to start"""
    _, ctrl, meta = curve
    knots = meta['knots']
    lo = knots[0]
    hi = knots[-1]
    rknots = [lo + hi - k for k in reversed(knots)]
    return nurbs(list(reversed(ctrl)), degree=meta['degree'], knots=rknots,
                 weights=list(reversed(meta['weights'])))


def translate_nurbs(curve, delta) -> list:
    _, ctrl, meta = curve
    return nurbs([add(p, delta) for p in ctrl], degree=meta['degree'],
                 knots=meta['knots'], weights=meta['weights'])


__all__ = [
    'nurbs',
    'isnurbs',
    'evaluate_nurbs',
    'sample_nurbs',
    'nurbs_by_control_points',
    'interpolate_nurbs',
    'reverse_nurbs',
    'translate_nurbs',
]
