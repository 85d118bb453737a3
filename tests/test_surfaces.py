import math

import pytest

from rebarcad.curves import length
from rebarcad.errors import DegenerateGeometryError, PreconditionError
from rebarcad.geom import arc3p, dist, line, point, vect
from rebarcad.surfaces import (
    bspline_surface,
    evaluate_surface,
    intersect_curve_surface,
    is_offset_surface,
    is_planar,
    issurface,
    loft_surface,
    offset_surface,
    patch_surface,
    perimeter_curves,
    plane_surface,
    quad_surface,
    surface_contains,
    surface_normal,
    surface_parameter_at_point,
    tessellate,
)


def _close(a, b, tol=1e-6):
    assert dist(point(a), point(b)) <= tol


def _unit_plane(size=1.0, z=0.0):
    return plane_surface(point(0, 0, z), vect(1, 0, 0, 0), vect(0, 1, 0, 0), size, size)


def _l_shape():
    return patch_surface([point(0, 0), point(2, 0), point(2, 1),
                          point(1, 1), point(1, 2), point(0, 2)])


def _wall():
    return loft_surface(line(point(0, 0, 0), point(1, 0, 0)),
                        line(point(0, 0, 1), point(1, 0, 1)))


class TestPlaneSurface:
    def test_evaluate(self):
        surf = plane_surface(point(1, 1, 0), vect(1, 0, 0, 0), vect(0, 1, 0, 0), 4.0, 2.0)
        assert issurface(surf) and is_planar(surf)
        _close(evaluate_surface(surf, 0, 0), point(1, 1))
        _close(evaluate_surface(surf, 1, 1), point(5, 3))
        _close(evaluate_surface(surf, 0.5, 0.5), point(3, 2))
        _close(surface_normal(surf, 0.2, 0.2), vect(0, 0, 1, 0))

    def test_axes_orthogonalized(self):
        surf = plane_surface(point(0, 0), vect(1, 0, 0, 0), vect(1, 1, 0, 0), 1.0, 1.0)
        _close(evaluate_surface(surf, 0, 1), point(0, 1))

    def test_bad_extent(self):
        with pytest.raises(PreconditionError):
            plane_surface(point(0, 0), vect(1, 0, 0, 0), vect(0, 1, 0, 0), 0.0, 1.0)

    def test_perimeter(self):
        curves = perimeter_curves(_unit_plane(2.0))
        assert len(curves) == 4
        _close(curves[0][0], point(0, 0))
        _close(curves[1][0], point(2, 0))
        _close(curves[2][0], point(2, 2))
        _close(curves[3][1], point(0, 0))

    def test_parameter_at_point(self):
        u, v = surface_parameter_at_point(_unit_plane(4.0), point(1, 3, 7))
        assert u == pytest.approx(0.25)
        assert v == pytest.approx(0.75)


class TestPatchSurface:
    def test_trim(self):
        surf = _l_shape()
        assert is_planar(surf)
        _close(surface_normal(surf, 0.5, 0.5), vect(0, 0, 1, 0))
        assert surface_contains(surf, 0.25, 0.25)
        assert surface_contains(surf, 0.25, 0.75)
        assert not surface_contains(surf, 0.75, 0.75)
        # edges count as inside
        assert surface_contains(surf, 0.5, 0.75)
        assert not surface_contains(surf, 1.5, 0.25)

    def test_perimeter_follows_polygon(self):
        curves = perimeter_curves(_l_shape())
        assert len(curves) == 6
        _close(curves[3][0], point(1, 1))
        _close(curves[3][1], point(1, 2))

    def test_closed_polygon_and_degenerate(self):
        surf = patch_surface([point(0, 0), point(1, 0), point(1, 1), point(0, 0)])
        assert len(perimeter_curves(surf)) == 3
        with pytest.raises(PreconditionError):
            patch_surface([point(0, 0), point(1, 0)])
        with pytest.raises(DegenerateGeometryError):
            patch_surface([point(0, 0), point(1, 0), point(2, 0)])

    def test_tessellate_skips_trimmed_cells(self):
        assert len(tessellate(_l_shape(), 2)) == 6
        assert len(tessellate(_unit_plane(), 2)) == 8


class TestCurvedSurfaces:
    def test_quad(self):
        surf = quad_surface(point(0, 0), point(2, 0), point(2, 2), point(0, 2))
        _close(evaluate_surface(surf, 0.5, 0.25), point(1, 0.5))
        _close(surface_normal(surf, 0.3, 0.3), vect(0, 0, 1, 0))
        assert len(perimeter_curves(surf)) == 4

    def test_quad_parameter_at_point(self):
        surf = quad_surface(point(0, 0), point(2, 0), point(3, 2), point(0, 1))
        p = evaluate_surface(surf, 0.3, 0.7)
        u, v = surface_parameter_at_point(surf, p)
        assert u == pytest.approx(0.3, abs=1e-6)
        assert v == pytest.approx(0.7, abs=1e-6)

    def test_loft(self):
        surf = _wall()
        _close(evaluate_surface(surf, 0.5, 0.5), point(0.5, 0, 0.5))
        n = surface_normal(surf, 0.5, 0.5)
        assert abs(abs(n[1]) - 1.0) < 1e-6
        curves = perimeter_curves(surf)
        assert len(curves) == 4
        _close(curves[1][0], point(1, 0, 0))
        _close(curves[1][1], point(1, 0, 1))
        assert sum(length(c) for c in curves) == pytest.approx(4.0)

    def test_degenerate_loft_normal(self):
        l = line(point(0, 0), point(1, 0))
        with pytest.raises(DegenerateGeometryError):
            surface_normal(loft_surface(l, l), 0.5, 0.5)
        with pytest.raises(PreconditionError):
            loft_surface(l, point(0, 0))

    def test_bspline(self):
        grid = [[point(0, 0), point(0, 2)],
                [point(2, 0), point(2, 2)]]
        surf = bspline_surface(grid)
        assert surf[2]['degree_u'] == 1
        _close(evaluate_surface(surf, 0.5, 0.5), point(1, 1))
        with pytest.raises(PreconditionError):
            bspline_surface([[point(0, 0), point(0, 1)], [point(1, 0)]])

    def test_bspline_bulge(self):
        grid = [[point(0, 0, 0), point(0, 1, 0), point(0, 2, 0)],
                [point(1, 0, 0), point(1, 1, 2), point(1, 2, 0)],
                [point(2, 0, 0), point(2, 1, 0), point(2, 2, 0)]]
        surf = bspline_surface(grid, 2, 2)
        # centre weight of a biquadratic Bezier patch is 1/4
        _close(evaluate_surface(surf, 0.5, 0.5), point(1, 1, 0.5))
        _close(evaluate_surface(surf, 0, 0), point(0, 0, 0))


class TestOffsetSurface:
    def test_plane_offset_is_exact(self):
        surf = offset_surface(_unit_plane(), 2.0)
        assert is_planar(surf)
        _close(evaluate_surface(surf, 0.5, 0.5), point(0.5, 0.5, 2))
        assert offset_surface(_unit_plane(), 0.0) == _unit_plane()

    def test_patch_offset_moves_polygon(self):
        surf = offset_surface(_l_shape(), -1.0)
        _close(perimeter_curves(surf)[0][0], point(0, 0, -1))
        assert not surface_contains(surf, 0.75, 0.75)

    def test_curved_offset_wraps(self):
        surf = offset_surface(_wall(), 0.5)
        assert is_offset_surface(surf)
        p = evaluate_surface(surf, 0.5, 0.5)
        assert abs(abs(p[1]) - 0.5) < 1e-6
        again = offset_surface(surf, 0.5)
        assert again[2]['distance'] == pytest.approx(1.0)
        assert len(perimeter_curves(surf)) == 4


class TestIntersection:
    def test_line_plane(self):
        hits = intersect_curve_surface(line(point(0.5, 0.5, -1), point(0.5, 0.5, 1)), _unit_plane())
        assert len(hits) == 1
        t, p = hits[0]
        assert t == pytest.approx(0.5)
        _close(p, point(0.5, 0.5, 0))

    def test_line_misses_plane_extent(self):
        assert intersect_curve_surface(line(point(5, 5, -1), point(5, 5, 1)), _unit_plane()) == []
        assert intersect_curve_surface(line(point(0.5, 0.5, 1), point(0.5, 0.5, 2)), _unit_plane()) == []

    def test_line_patch_trim(self):
        inside = line(point(0.5, 1.5, -1), point(0.5, 1.5, 1))
        outside = line(point(1.5, 1.5, -1), point(1.5, 1.5, 1))
        assert len(intersect_curve_surface(inside, _l_shape())) == 1
        assert intersect_curve_surface(outside, _l_shape()) == []

    def test_arc_plane(self):
        arc = arc3p(point(-1, 0, 0), point(0, 0, 1), point(1, 0, 0))
        cutter = plane_surface(point(-2, -2, 0.5), vect(1, 0, 0, 0), vect(0, 1, 0, 0), 4.0, 4.0)
        hits = intersect_curve_surface(arc, cutter)
        assert len(hits) == 2
        assert hits[0][0] == pytest.approx(1.0 / 6.0, abs=1e-6)
        assert hits[1][0] == pytest.approx(5.0 / 6.0, abs=1e-6)
        _close(hits[0][1], point(-math.sqrt(0.75), 0, 0.5))

    def test_line_loft(self):
        hits = intersect_curve_surface(line(point(0.25, -1, 0.5), point(0.25, 1, 0.5)), _wall())
        assert len(hits) == 1
        assert hits[0][0] == pytest.approx(0.5, abs=1e-6)
        _close(hits[0][1], point(0.25, 0, 0.5))
