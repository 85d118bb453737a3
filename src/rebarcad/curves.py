"""generic curve operations for **rebarCAD**

Every routine in rebarCAD works on "a curve" without caring which kind
it is.  This module supplies the dispatch: each function inspects the
curve and hands off to the line, arc or NURBS implementation, or to one
of the composite kinds defined here.

composite curves
================

``['polycurve', [c0, c1, ...], {'lengths': [...]}]``
    contiguous curves joined end to start, parameterized by arc length
    so that ``u`` is the fraction of the total length travelled.

``['surface_line', surface, {'uv0': [u, v], 'uv1': [u, v]}]``
    the curve traced on a surface by a straight line in its parameter
    space.

``['segment', base, {'u0': a, 'u1': b}]``
    the portion of ``base`` between two of its parameters, used for
    curves with no closed-form trim.

All curves are parameterized over ``0 <= u <= 1``.
"""

import logging

from rebarcad.errors import DegenerateGeometryError, PreconditionError
from rebarcad.geom import (add, arclength, cross, dist, epsilon, isarc, isline,
                           linelength, point, reversearc, samplearc,
                           sampleline, scale3, segmentarc, segmentline, sub,
                           translatearc, unit, unsamplearc, unsampleline)
from rebarcad.spline import (evaluate_nurbs, interpolate_nurbs, isnurbs,
                             reverse_nurbs, translate_nurbs)

logger = logging.getLogger(__name__)

## number of chords used to measure and search curves with no closed form
MEASURE_SAMPLES = 128


## composite curve constructors
## ----------------------------

def polycurve(curves, tol=1e-6):
    """join contiguous ``curves`` into a single curve.

    Each curve must start where the previous one ends (within ``tol``).
    Nested polycurves are flattened.
    """
    pieces = []
    for c in curves:
        if ispolycurve(c):
            pieces.extend(c[1])
        else:
            pieces.append(c)
    if not pieces:
        raise PreconditionError('polycurve needs at least one curve')
    for a, b in zip(pieces, pieces[1:]):
        if dist(end_point(a), start_point(b)) > tol:
            raise PreconditionError('polycurve pieces are not contiguous')
    lengths = [length(c) for c in pieces]
    return ['polycurve', pieces, {'lengths': lengths}]


def ispolycurve(c):
    return isinstance(c, list) and len(c) == 3 and c[0] == 'polycurve'


def surface_line(surf, uv0, uv1):
    """curve on ``surf`` following the straight parameter space line
    from ``uv0`` to ``uv1``"""
    return ['surface_line', surf, {'uv0': [float(uv0[0]), float(uv0[1])],
                                   'uv1': [float(uv1[0]), float(uv1[1])]}]


def issurfaceline(c):
    return isinstance(c, list) and len(c) == 3 and c[0] == 'surface_line'


def issegment(c):
    return isinstance(c, list) and len(c) == 3 and c[0] == 'segment'


def iscurve(c):
    """ is it any kind of curve rebarCAD understands?"""
    return isline(c) or isarc(c) or isnurbs(c) or ispolycurve(c) \
        or issurfaceline(c) or issegment(c)


## polycurve helpers

def _locate(pc, u):
    # piece index and local parameter for global parameter u
    pieces = pc[1]
    lengths = pc[2]['lengths']
    total = sum(lengths)
    if total < 1e-15:
        return 0, u
    s = u * total
    if s <= 0.0:
        return 0, s / lengths[0] if lengths[0] > 0.0 else 0.0
    acc = 0.0
    for i, l in enumerate(lengths):
        if s <= acc + l or i == len(pieces) - 1:
            if l <= 0.0:
                return i, 0.0
            return i, (s - acc) / l
        acc += l
    return len(pieces) - 1, 1.0


def _global(pc, i, local):
    lengths = pc[2]['lengths']
    total = sum(lengths)
    if total < 1e-15:
        return 0.0
    return (sum(lengths[:i]) + local * lengths[i]) / total


## generic operations
## ------------------

def sample(c, u):
    """point on curve ``c`` at parameter ``u``"""
    if isline(c):
        return sampleline(c, u)
    elif isarc(c):
        return samplearc(c, u)
    elif isnurbs(c):
        return evaluate_nurbs(c, u)
    elif ispolycurve(c):
        i, local = _locate(c, u)
        return sample(c[1][i], local)
    elif issurfaceline(c):
        from rebarcad.surfaces import evaluate_surface
        uv0 = c[2]['uv0']
        uv1 = c[2]['uv1']
        return evaluate_surface(c[1],
                                uv0[0] + (uv1[0] - uv0[0]) * u,
                                uv0[1] + (uv1[1] - uv0[1]) * u)
    elif issegment(c):
        u0 = c[2]['u0']
        u1 = c[2]['u1']
        return sample(c[1], u0 + (u1 - u0) * u)
    raise ValueError('bad curve passed to sample()')


def start_point(c):
    return sample(c, 0.0)


def end_point(c):
    return sample(c, 1.0)


def _chord_length(c, samples=MEASURE_SAMPLES):
    pts = [sample(c, i / samples) for i in range(samples + 1)]
    return sum(dist(a, b) for a, b in zip(pts, pts[1:]))


def length(c):
    """ return the length of a curve"""
    if isline(c):
        return linelength(c)
    elif isarc(c):
        return arclength(c)
    elif ispolycurve(c):
        return sum(c[2]['lengths'])
    elif iscurve(c):
        return _chord_length(c)
    raise ValueError('bad curve passed to length()')


def reverse(c):
    """ the same curve, traversed in the opposite direction"""
    if isline(c):
        return [point(c[1]), point(c[0])]
    elif isarc(c):
        return reversearc(c)
    elif isnurbs(c):
        return reverse_nurbs(c)
    elif ispolycurve(c):
        return ['polycurve', [reverse(p) for p in reversed(c[1])],
                {'lengths': list(reversed(c[2]['lengths']))}]
    elif issurfaceline(c):
        return surface_line(c[1], c[2]['uv1'], c[2]['uv0'])
    elif issegment(c):
        return ['segment', c[1], {'u0': c[2]['u1'], 'u1': c[2]['u0']}]
    raise ValueError('bad curve passed to reverse()')


def translate(c, delta):
    """ copy of ``c`` moved by the vector ``delta``"""
    if isline(c):
        return [add(c[0], delta), add(c[1], delta)]
    elif isarc(c):
        return translatearc(c, delta)
    elif isnurbs(c):
        return translate_nurbs(c, delta)
    elif ispolycurve(c):
        return ['polycurve', [translate(p, delta) for p in c[1]],
                {'lengths': list(c[2]['lengths'])}]
    elif issegment(c):
        return ['segment', translate(c[1], delta), dict(c[2])]
    elif issurfaceline(c):
        # no closed form; refit through translated samples
        pts = [add(sample(c, i / 32), delta) for i in range(33)]
        return interpolate_nurbs(pts)
    raise ValueError('bad curve passed to translate()')


def tangent(c, u):
    """unit tangent direction of ``c`` at ``u``"""
    if isline(c):
        return unit(sub(c[1], c[0]))
    elif isarc(c):
        meta = c[2]
        d = sub(samplearc(c, u), c[1])
        t = cross(meta['normal'], d)
        if meta['sweep'] < 0.0:
            t = scale3(t, -1.0)
        return unit(t)
    h = 1e-6
    u0 = max(0.0, u - h)
    u1 = min(1.0, u + h)
    return unit(sub(sample(c, u1), sample(c, u0)))


def segment(c, u0, u1):
    """the part of ``c`` between parameters ``u0`` and ``u1``"""
    if isline(c):
        return segmentline(c, u0, u1)
    elif isarc(c):
        return segmentarc(c, u0, u1)
    elif issurfaceline(c):
        uv0 = c[2]['uv0']
        uv1 = c[2]['uv1']
        return surface_line(c[1],
                            [uv0[0] + (uv1[0] - uv0[0]) * u0, uv0[1] + (uv1[1] - uv0[1]) * u0],
                            [uv0[0] + (uv1[0] - uv0[0]) * u1, uv0[1] + (uv1[1] - uv0[1]) * u1])
    elif issegment(c):
        a = c[2]['u0']
        b = c[2]['u1']
        return ['segment', c[1], {'u0': a + (b - a) * u0, 'u1': a + (b - a) * u1}]
    elif ispolycurve(c) or isnurbs(c):
        return ['segment', c, {'u0': float(u0), 'u1': float(u1)}]
    raise ValueError('bad curve passed to segment()')


def split(c, u):
    """split ``c`` at ``u``, returning the two pieces"""
    return segment(c, 0.0, u), segment(c, u, 1.0)


def parameter_at_length(c, s):
    """parameter of the point at arc length ``s`` from the start of ``c``.
    Lines and arcs extrapolate for ``s`` outside the curve."""
    if isline(c) or isarc(c):
        L = length(c)
        if L < 1e-15:
            raise DegenerateGeometryError('zero length curve has no length parameterization')
        return s / L
    elif ispolycurve(c):
        L = length(c)
        if L < 1e-15:
            raise DegenerateGeometryError('zero length curve has no length parameterization')
        return max(0.0, min(1.0, s / L))
    n = MEASURE_SAMPLES
    pts = [sample(c, i / n) for i in range(n + 1)]
    acc = 0.0
    if s <= 0.0:
        return 0.0
    for i in range(n):
        d = dist(pts[i], pts[i + 1])
        if acc + d >= s:
            frac = (s - acc) / d if d > 0.0 else 0.0
            return (i + frac) / n
        acc += d
    return 1.0


def closest_parameter(c, p):
    """parameter of the point on ``c`` nearest ``p``"""
    if isline(c):
        return max(0.0, min(1.0, unsampleline(c, p)))
    elif isarc(c):
        return max(0.0, min(1.0, unsamplearc(c, p)))
    elif ispolycurve(c):
        best = None
        for i, piece in enumerate(c[1]):
            local = closest_parameter(piece, p)
            d = dist(sample(piece, local), p)
            if best is None or d < best[0]:
                best = (d, _global(c, i, local))
        return best[1]
    n = 64
    best_i = min(range(n + 1), key=lambda i: dist(sample(c, i / n), p))
    lo = max(0.0, (best_i - 1) / n)
    hi = min(1.0, (best_i + 1) / n)
    # golden section search around the best sample
    g = 0.6180339887498949
    a = hi - g * (hi - lo)
    b = lo + g * (hi - lo)
    fa = dist(sample(c, a), p)
    fb = dist(sample(c, b), p)
    while hi - lo > 1e-10:
        if fa < fb:
            hi = b
            b = a
            fb = fa
            a = hi - g * (hi - lo)
            fa = dist(sample(c, a), p)
        else:
            lo = a
            a = b
            fa = fb
            b = lo + g * (hi - lo)
            fb = dist(sample(c, b), p)
    return (lo + hi) / 2.0


def closest_point(c, p):
    return sample(c, closest_parameter(c, p))


def is_curved(c):
    """``True`` when the curve is longer than its chord, which is how
    an arc is told apart from a line"""
    if isline(c):
        return False
    return length(c) - dist(start_point(c), end_point(c)) > epsilon


def is_linear(c):
    return not is_curved(c)


__all__ = [
    'MEASURE_SAMPLES',
    'polycurve', 'ispolycurve', 'surface_line', 'issurfaceline',
    'issegment', 'iscurve',
    'sample', 'start_point', 'end_point', 'length', 'reverse', 'translate',
    'tangent', 'segment', 'split', 'parameter_at_length',
    'closest_parameter', 'closest_point', 'is_curved', 'is_linear',
]
