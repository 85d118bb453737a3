"""Parametric surfaces for rebarCAD.

Surfaces are tagged lists in the yapCAD manner, evaluated over the unit
parameter square ``0 <= u, v <= 1``:

- ``plane_surface``: a rectangle spanned by two axes
- ``quad_surface``: a bilinear patch through four corners
- ``loft_surface``: the ruled surface between two curves, ``u`` running
  along the curves and ``v`` across from the first to the second
- ``bspline_surface``: a tensor product B-spline patch
- ``patch_surface``: a planar polygon trimmed out of its bounding rectangle
- ``offset_surface``: a surface moved along its own normal

Besides evaluation, normals and perimeter curves, the module provides
:func:`intersect_curve_surface`, which locates the points where a curve
crosses a surface.  Hits are seeded by intersecting the sampled curve
with a triangulation of the surface and then polished with Newton's
method on the exact geometry.
"""

import numpy as np

from rebarcad.curves import iscurve, reverse, sample, surface_line
from rebarcad.errors import DegenerateGeometryError, PreconditionError
from rebarcad.geom import (add, cross, dist, dot, isline, lerp, mag, point,
                           scale3, sub, unit, vclose)
from rebarcad.spline import _basis_functions, _clamped_knots, _find_span


# -----------------------------------------------------------------------------
# Planar surfaces
# -----------------------------------------------------------------------------

def _frame(x_axis, y_axis):
    x = unit(x_axis)
    y = sub(y_axis, scale3(x, dot(y_axis, x)))
    y = unit(y)
    return x, y, cross(x, y)


def plane_surface(origin, x_axis, y_axis, width, height):
    """Create a rectangular planar surface.

    Parameters
    ----------
    origin : point
        Corner at ``(u, v) = (0, 0)``.
    x_axis, y_axis : vector
        Directions of increasing ``u`` and ``v``.  ``y_axis`` is made
        orthogonal to ``x_axis``.
    width, height : float
        Extent along ``x_axis`` and ``y_axis``.

    Returns
    -------
    list
        ``['plane_surface', origin, meta]``
    """
    if width <= 0.0 or height <= 0.0:
        raise PreconditionError('plane width and height must be positive')
    x, y, n = _frame(x_axis, y_axis)
    meta = {
        'x_axis': x,
        'y_axis': y,
        'normal': n,
        'width': float(width),
        'height': float(height),
    }
    return ['plane_surface', point(origin), meta]


def is_plane_surface(obj):
    return isinstance(obj, list) and len(obj) == 3 and obj[0] == 'plane_surface'


def _newell_normal(pts):
    nx = ny = nz = 0.0
    for a, b in zip(pts, pts[1:] + pts[:1]):
        nx += (a[1] - b[1]) * (a[2] + b[2])
        ny += (a[2] - b[2]) * (a[0] + b[0])
        nz += (a[0] - b[0]) * (a[1] + b[1])
    return unit([nx, ny, nz, 0.0])


def patch_surface(points):
    """Create a planar surface bounded by the closed polygon ``points``.

    The polygon is mapped into the unit parameter square through its
    bounding rectangle; parameters outside the polygon are not part of
    the surface.  Perimeter curves follow the polygon order.
    """
    pts = [point(p) for p in points]
    if len(pts) > 1 and vclose(pts[0], pts[-1]):
        pts = pts[:-1]
    if len(pts) < 3:
        raise PreconditionError('a patch needs at least 3 boundary points')
    try:
        n = _newell_normal(pts)
    except DegenerateGeometryError:
        raise DegenerateGeometryError('patch boundary points are collinear')
    x = unit(sub(pts[1], pts[0]))
    y = cross(n, x)
    xs = [dot(sub(p, pts[0]), x) for p in pts]
    ys = [dot(sub(p, pts[0]), y) for p in pts]
    width = max(xs) - min(xs)
    height = max(ys) - min(ys)
    origin = add(pts[0], add(scale3(x, min(xs)), scale3(y, min(ys))))
    uv_polygon = [[(px - min(xs)) / width, (py - min(ys)) / height]
                  for px, py in zip(xs, ys)]
    meta = {
        'x_axis': x,
        'y_axis': y,
        'normal': n,
        'width': width,
        'height': height,
        'polygon': pts,
        'uv_polygon': uv_polygon,
    }
    return ['patch_surface', origin, meta]


def is_patch_surface(obj):
    return isinstance(obj, list) and len(obj) == 3 and obj[0] == 'patch_surface'


def _evaluate_planar(surf, u, v):
    origin = surf[1]
    meta = surf[2]
    return add(origin, add(scale3(meta['x_axis'], u * meta['width']),
                           scale3(meta['y_axis'], v * meta['height'])))


def _point_in_polygon(uv, polygon, tol=1e-9):
    u, v = uv
    for a, b in zip(polygon, polygon[1:] + polygon[:1]):
        # on an edge counts as inside
        ex = b[0] - a[0]
        ey = b[1] - a[1]
        len2 = ex * ex + ey * ey
        if len2 > 0.0:
            s = max(0.0, min(1.0, ((u - a[0]) * ex + (v - a[1]) * ey) / len2))
            dx = a[0] + s * ex - u
            dy = a[1] + s * ey - v
            if dx * dx + dy * dy <= tol * tol:
                return True
    inside = False
    for a, b in zip(polygon, polygon[1:] + polygon[:1]):
        if (a[1] > v) != (b[1] > v):
            x = a[0] + (v - a[1]) * (b[0] - a[0]) / (b[1] - a[1])
            if u < x:
                inside = not inside
    return inside


# -----------------------------------------------------------------------------
# Bilinear and ruled surfaces
# -----------------------------------------------------------------------------

def quad_surface(p00, p10, p11, p01):
    """Bilinear surface through four corners, given in ``(u, v)`` order
    ``(0,0), (1,0), (1,1), (0,1)``."""
    return ['quad_surface', [point(p00), point(p10), point(p11), point(p01)], {}]


def is_quad_surface(obj):
    return isinstance(obj, list) and len(obj) == 3 and obj[0] == 'quad_surface'


def _evaluate_quad(surf, u, v):
    p00, p10, p11, p01 = surf[1]
    return lerp(lerp(p00, p10, u), lerp(p01, p11, u), v)


def loft_surface(curve_a, curve_b):
    """Ruled surface between ``curve_a`` (``v = 0``) and ``curve_b``
    (``v = 1``)."""
    if not iscurve(curve_a) or not iscurve(curve_b):
        raise PreconditionError('loft_surface needs two curves')
    return ['loft_surface', [curve_a, curve_b], {}]


def is_loft_surface(obj):
    return isinstance(obj, list) and len(obj) == 3 and obj[0] == 'loft_surface'


# -----------------------------------------------------------------------------
# B-spline surfaces
# -----------------------------------------------------------------------------

def bspline_surface(control_points, degree_u=3, degree_v=3):
    """Tensor product B-spline surface with clamped uniform knots.

    ``control_points[i][j]`` is the control point in row ``i`` (along
    ``u``) and column ``j`` (along ``v``).  Degrees are reduced when a
    direction has too few control points.
    """
    grid = [[point(p) for p in row] for row in control_points]
    if len(grid) < 2 or len(grid[0]) < 2:
        raise PreconditionError('a B-spline surface needs at least a 2 x 2 control grid')
    if any(len(row) != len(grid[0]) for row in grid):
        raise PreconditionError('B-spline control grid must be rectangular')
    degree_u = min(int(degree_u), len(grid) - 1)
    degree_v = min(int(degree_v), len(grid[0]) - 1)
    if degree_u < 1 or degree_v < 1:
        raise PreconditionError('B-spline degrees must be >= 1')
    meta = {
        'degree_u': degree_u,
        'degree_v': degree_v,
        'knots_u': _clamped_knots(len(grid), degree_u),
        'knots_v': _clamped_knots(len(grid[0]), degree_v),
    }
    return ['bspline_surface', grid, meta]


def is_bspline_surface(obj):
    return isinstance(obj, list) and len(obj) == 3 and obj[0] == 'bspline_surface'


def _evaluate_bspline(surf, u, v):
    grid = surf[1]
    meta = surf[2]
    pu = meta['degree_u']
    pv = meta['degree_v']
    u = max(0.0, min(1.0, u))
    v = max(0.0, min(1.0, v))
    su = _find_span(len(grid) - 1, pu, u, meta['knots_u'])
    sv = _find_span(len(grid[0]) - 1, pv, v, meta['knots_v'])
    nu = _basis_functions(su, u, pu, meta['knots_u'])
    nv = _basis_functions(sv, v, pv, meta['knots_v'])
    x = y = z = 0.0
    for a in range(pu + 1):
        row = grid[su - pu + a]
        for b in range(pv + 1):
            w = nu[a] * nv[b]
            p = row[sv - pv + b]
            x += w * p[0]
            y += w * p[1]
            z += w * p[2]
    return point(x, y, z)


# -----------------------------------------------------------------------------
# Offset surfaces
# -----------------------------------------------------------------------------

def offset_surface(surf, distance):
    """``surf`` moved by ``distance`` along its normal.

    Planar surfaces are offset exactly into a new surface of the same
    kind; curved surfaces are wrapped.
    """
    if distance == 0.0:
        return surf
    if is_plane_surface(surf) or is_patch_surface(surf):
        delta = scale3(surf[2]['normal'], distance)
        meta = dict(surf[2])
        if is_patch_surface(surf):
            meta['polygon'] = [add(p, delta) for p in meta['polygon']]
        return [surf[0], add(surf[1], delta), meta]
    if is_offset_surface(surf):
        return offset_surface(surf[1], surf[2]['distance'] + distance)
    return ['offset_surface', surf, {'distance': float(distance)}]


def is_offset_surface(obj):
    return isinstance(obj, list) and len(obj) == 3 and obj[0] == 'offset_surface'


# -----------------------------------------------------------------------------
# Generic surface operations
# -----------------------------------------------------------------------------

def issurface(obj):
    """Return True if obj is any surface rebarCAD understands."""
    return (is_plane_surface(obj) or is_patch_surface(obj) or
            is_quad_surface(obj) or is_loft_surface(obj) or
            is_bspline_surface(obj) or is_offset_surface(obj))


def is_planar(surf):
    return is_plane_surface(surf) or is_patch_surface(surf)


def evaluate_surface(surf, u, v):
    """Evaluate a point on a surface at parameters (u, v)."""
    if is_plane_surface(surf) or is_patch_surface(surf):
        return _evaluate_planar(surf, u, v)
    elif is_quad_surface(surf):
        return _evaluate_quad(surf, u, v)
    elif is_loft_surface(surf):
        a, b = surf[1]
        return lerp(sample(a, u), sample(b, u), v)
    elif is_bspline_surface(surf):
        return _evaluate_bspline(surf, u, v)
    elif is_offset_surface(surf):
        base = surf[1]
        return add(evaluate_surface(base, u, v),
                   scale3(surface_normal(base, u, v), surf[2]['distance']))
    raise ValueError('bad surface passed to evaluate_surface()')


def _partials(surf, u, v):
    if is_planar(surf):
        meta = surf[2]
        return scale3(meta['x_axis'], meta['width']), scale3(meta['y_axis'], meta['height'])
    elif is_quad_surface(surf):
        p00, p10, p11, p01 = surf[1]
        su = add(scale3(sub(p10, p00), 1.0 - v), scale3(sub(p11, p01), v))
        sv = add(scale3(sub(p01, p00), 1.0 - u), scale3(sub(p11, p10), u))
        return su, sv
    h = 1e-6
    u0, u1 = max(0.0, u - h), min(1.0, u + h)
    v0, v1 = max(0.0, v - h), min(1.0, v + h)
    su = scale3(sub(evaluate_surface(surf, u1, v), evaluate_surface(surf, u0, v)),
                1.0 / (u1 - u0))
    sv = scale3(sub(evaluate_surface(surf, u, v1), evaluate_surface(surf, u, v0)),
                1.0 / (v1 - v0))
    return su, sv


def surface_normal(surf, u, v):
    """Unit normal at (u, v), ``dS/du x dS/dv``.

    Raises ``DegenerateGeometryError`` where the surface collapses, for
    example a loft between two coincident curves.
    """
    if is_planar(surf):
        return list(surf[2]['normal'])
    if is_offset_surface(surf):
        return surface_normal(surf[1], u, v)
    su, sv = _partials(surf, u, v)
    n = cross(su, sv)
    scale = max(mag(su), mag(sv))
    if mag(n) <= 1e-9 * scale * scale:
        raise DegenerateGeometryError(
            'surface has no normal at ({:.6g}, {:.6g})'.format(u, v))
    return unit(n)


def surface_contains(surf, u, v, tol=1e-9):
    """Is (u, v) part of the (possibly trimmed) surface?"""
    if u < -tol or u > 1.0 + tol or v < -tol or v > 1.0 + tol:
        return False
    if is_patch_surface(surf):
        return _point_in_polygon((u, v), surf[2]['uv_polygon'])
    if is_offset_surface(surf):
        return surface_contains(surf[1], u, v, tol)
    return True


def perimeter_curves(surf):
    """Closed loop of boundary curves.

    Untrimmed surfaces run counter-clockwise around the parameter square
    starting at ``(0, 0)``; patches follow their polygon.
    """
    if is_patch_surface(surf):
        pts = surf[2]['polygon']
        return [[point(a), point(b)] for a, b in zip(pts, pts[1:] + pts[:1])]
    elif is_plane_surface(surf) or is_quad_surface(surf):
        c = [evaluate_surface(surf, 0.0, 0.0), evaluate_surface(surf, 1.0, 0.0),
             evaluate_surface(surf, 1.0, 1.0), evaluate_surface(surf, 0.0, 1.0)]
        return [[c[0], c[1]], [c[1], c[2]], [c[2], c[3]], [c[3], c[0]]]
    elif is_loft_surface(surf):
        a, b = surf[1]
        return [a,
                [sample(a, 1.0), sample(b, 1.0)],
                reverse(b),
                [sample(b, 0.0), sample(a, 0.0)]]
    elif issurface(surf):
        corners = [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]]
        return [surface_line(surf, a, b) for a, b in zip(corners, corners[1:] + corners[:1])]
    raise ValueError('bad surface passed to perimeter_curves()')


def surface_parameter_at_point(surf, p, iterations=30):
    """(u, v) of the surface point closest to ``p``"""
    if is_planar(surf):
        meta = surf[2]
        d = sub(p, surf[1])
        return (dot(d, meta['x_axis']) / meta['width'],
                dot(d, meta['y_axis']) / meta['height'])
    n = 16
    best = None
    for i in range(n + 1):
        for j in range(n + 1):
            d = dist(evaluate_surface(surf, i / n, j / n), p)
            if best is None or d < best[0]:
                best = (d, i / n, j / n)
    _, u, v = best
    for _ in range(iterations):
        su, sv = _partials(surf, u, v)
        r = sub(p, evaluate_surface(surf, u, v))
        a = np.array([[dot(su, su), dot(su, sv)], [dot(su, sv), dot(sv, sv)]])
        b = np.array([dot(su, r), dot(sv, r)])
        try:
            du, dv = np.linalg.solve(a, b)
        except np.linalg.LinAlgError:
            break
        u = max(0.0, min(1.0, u + du))
        v = max(0.0, min(1.0, v + dv))
        if abs(du) < 1e-12 and abs(dv) < 1e-12:
            break
    return u, v


def _uv_grid(surf, n):
    return [[(evaluate_surface(surf, i / n, j / n), (i / n, j / n))
             for j in range(n + 1)] for i in range(n + 1)]


def _uv_triangles(surf, n):
    grid = _uv_grid(surf, n)
    tris = []
    for i in range(n):
        for j in range(n):
            a = grid[i][j]
            b = grid[i + 1][j]
            c = grid[i + 1][j + 1]
            d = grid[i][j + 1]
            tris.append((a, b, c))
            tris.append((a, c, d))
    return tris


def tessellate(surf, n=16):
    """Triangulate the surface on an ``n`` x ``n`` parameter grid.

    Returns a list of triangles, each a list of three points.  Triangles
    of trimmed surfaces whose centroid falls outside the trim are left
    out.
    """
    if n < 1:
        raise PreconditionError('tessellation needs at least one division')
    tris = []
    for tri in _uv_triangles(surf, n):
        cu = sum(t[1][0] for t in tri) / 3.0
        cv = sum(t[1][1] for t in tri) / 3.0
        if surface_contains(surf, cu, cv):
            tris.append([t[0] for t in tri])
    return tris


# -----------------------------------------------------------------------------
# Curve / surface intersection
# -----------------------------------------------------------------------------

def _segment_triangle(p0, p1, tri, tol=1e-6):
    (a, uva), (b, uvb), (c, uvc) = tri
    d = sub(p1, p0)
    e1 = sub(b, a)
    e2 = sub(c, a)
    h = cross(d, e2)
    det = dot(e1, h)
    if abs(det) <= 1e-14 * mag(d) * mag(e1) * mag(e2):
        return None
    f = 1.0 / det
    s = sub(p0, a)
    bu = f * dot(s, h)
    if bu < -tol or bu > 1.0 + tol:
        return None
    q = cross(s, e1)
    bv = f * dot(d, q)
    if bv < -tol or bu + bv > 1.0 + tol:
        return None
    t = f * dot(e2, q)
    if t < -tol or t > 1.0 + tol:
        return None
    bw = 1.0 - bu - bv
    return t, (uva[0] * bw + uvb[0] * bu + uvc[0] * bv,
               uva[1] * bw + uvb[1] * bu + uvc[1] * bv)


def _curve_derivative(curve, t):
    if isline(curve):
        return sub(curve[1], curve[0])
    h = 1e-6
    t0, t1 = max(0.0, t - h), min(1.0, t + h)
    return scale3(sub(sample(curve, t1), sample(curve, t0)), 1.0 / (t1 - t0))


def _clamp(x):
    return max(0.0, min(1.0, x))


def _refine(curve, surf, t, u, v, iterations=40):
    for _ in range(iterations):
        f = sub(sample(curve, t), evaluate_surface(surf, u, v))
        if mag(f) < 1e-12:
            break
        ct = _curve_derivative(curve, t)
        su, sv = _partials(surf, u, v)
        jac = np.array([[ct[k], -su[k], -sv[k]] for k in range(3)])
        try:
            dt, du, dv = np.linalg.solve(jac, -np.array(f[:3]))
        except np.linalg.LinAlgError:
            break
        t = _clamp(t + dt)
        u = _clamp(u + du)
        v = _clamp(v + dv)
        if abs(dt) < 1e-15 and abs(du) < 1e-13 and abs(dv) < 1e-13:
            break
    return t, u, v


def _intersect_line_plane(ln, surf):
    n = surf[2]['normal']
    d = sub(ln[1], ln[0])
    denom = dot(d, n)
    if abs(denom) < 1e-15 * mag(d):
        return []
    t = dot(sub(surf[1], ln[0]), n) / denom
    if t < -1e-12 or t > 1.0 + 1e-12:
        return []
    t = _clamp(t)
    p = sample(ln, t)
    u, v = surface_parameter_at_point(surf, p)
    if not surface_contains(surf, u, v, 1e-7):
        return []
    return [(t, p)]


def intersect_curve_surface(curve, surf, segments=64, divisions=16):
    """Points where ``curve`` crosses ``surf``.

    Parameters
    ----------
    curve : curve
        Any curve; lines are treated as single segments.
    surf : surface
        Any surface; hits outside a patch's trim are dropped.
    segments : int
        Number of chords used to seed hits on curved curves.
    divisions : int
        Parameter grid used to triangulate curved surfaces.

    Returns
    -------
    list
        ``(t, point)`` pairs sorted by the curve parameter ``t``.
    """
    if isline(curve) and is_planar(surf):
        return _intersect_line_plane(curve, surf)

    nseg = 1 if isline(curve) else segments
    tris = _uv_triangles(surf, 1 if is_planar(surf) else divisions)
    ts = [i / nseg for i in range(nseg + 1)]
    pts = [sample(curve, t) for t in ts]

    hits = []
    for i in range(nseg):
        p0, p1 = pts[i], pts[i + 1]
        for tri in tris:
            seed = _segment_triangle(p0, p1, tri)
            if seed is None:
                continue
            s, (u, v) = seed
            t = ts[i] + (ts[i + 1] - ts[i]) * s
            t, u, v = _refine(curve, surf, t, u, v)
            cp = sample(curve, t)
            miss = dist(cp, evaluate_surface(surf, u, v))
            if miss > 1e-6 * max(1.0, mag(cp)):
                continue
            if not surface_contains(surf, u, v, 1e-7):
                continue
            hits.append((t, cp))

    hits.sort(key=lambda h: h[0])
    result = []
    for t, p in hits:
        if result and dist(result[-1][1], p) < 1e-6:
            continue
        result.append((t, p))
    return result


__all__ = [
    'plane_surface', 'is_plane_surface',
    'patch_surface', 'is_patch_surface',
    'quad_surface', 'is_quad_surface',
    'loft_surface', 'is_loft_surface',
    'bspline_surface', 'is_bspline_surface',
    'offset_surface', 'is_offset_surface',
    'issurface', 'is_planar',
    'evaluate_surface', 'surface_normal', 'surface_contains',
    'perimeter_curves', 'surface_parameter_at_point', 'tessellate',
    'intersect_curve_surface',
]
