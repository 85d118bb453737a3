import pytest

from rebarcad.curves import end_point, sample, start_point
from rebarcad.errors import DegenerateGeometryError, PreconditionError
from rebarcad.geom import arc3p, dist, line, point
from rebarcad.morph import (
    endpoint_alignment,
    morph,
    morph_matrix,
    paired_distance_alignment,
)
from rebarcad.spline import isnurbs, nurbs_by_control_points


def _close(a, b, tol=1e-6):
    assert dist(point(a), point(b)) <= tol


def _bottom():
    return line(point(0, 0, 0), point(10, 0, 0))


def _top():
    return line(point(0, 10, 0), point(10, 10, 0))


def test_matrix_shape():
    m = morph_matrix(_bottom(), _top(), 3, precision=5)
    assert len(m) == 6
    assert all(len(row) == 5 for row in m)
    _close(m[0][0], point(0, 0))
    _close(m[0][-1], point(0, 10))
    _close(m[5][2], point(10, 5))


def test_parallel_lines():
    curves = morph(_bottom(), _top(), 4)
    assert len(curves) == 4
    for k, c in enumerate(curves, start=1):
        assert isnurbs(c)
        y = 10.0 * k / 5
        _close(start_point(c), point(0, y))
        _close(end_point(c), point(10, y))
        _close(sample(c, 0.5), point(5, y))


def test_reversed_second_curve_is_aligned():
    flipped = line(point(10, 10, 0), point(0, 10, 0))
    a = morph(_bottom(), _top(), 3)
    b = morph(_bottom(), flipped, 3)
    for ca, cb in zip(a, b):
        _close(start_point(ca), start_point(cb))
        _close(end_point(ca), end_point(cb))


def test_include_ends():
    curves = morph(_bottom(), _top(), 2, precision=4, include_ends=True)
    assert len(curves) == 4
    _close(start_point(curves[0]), point(0, 0))
    _close(end_point(curves[-1]), point(10, 10))


def test_offset_along_loft_normal():
    curves = morph(_bottom(), _top(), 2, offset=2.0)
    for c in curves:
        assert abs(start_point(c)[2] - 2.0) < 1e-9
        assert abs(end_point(c)[2] - 2.0) < 1e-9


def test_line_to_arc():
    arc = arc3p(point(0, 10), point(5, 15), point(10, 10))
    curves = morph(_bottom(), arc, 1, precision=20)
    assert len(curves) == 1
    _close(start_point(curves[0]), point(0, 5))
    _close(end_point(curves[0]), point(10, 5))
    _close(sample(curves[0], 0.5), point(5, 7.5), tol=1e-3)


def test_custom_fit():
    curves = morph(_bottom(), _top(), 1, precision=3, fit=nurbs_by_control_points)
    assert curves[0][2]['degree'] == 3
    assert len(curves[0][1]) == 4


def test_alignment_strategies():
    a = [point(0, 0), point(1, 0), point(2, 0)]
    b = [point(2, 1), point(1, 1), point(0, 1)]
    assert endpoint_alignment(a, b)[0] == point(0, 1)
    assert paired_distance_alignment(a, b)[0] == point(0, 1)
    same = [point(0, 1), point(1, 1), point(2, 1)]
    assert paired_distance_alignment(a, same) == same


@pytest.mark.parametrize('count', [0, -2, 1.5])
def test_bad_count(count):
    with pytest.raises(PreconditionError):
        morph(_bottom(), _top(), count)


def test_missing_curve():
    with pytest.raises(PreconditionError):
        morph(None, _top(), 2)
    with pytest.raises(PreconditionError):
        morph(_bottom(), _top(), 2, precision=0)


def test_identical_curves():
    arc = arc3p(point(0, 0), point(5, 5), point(10, 0))
    curves = morph(arc, arc, 3, precision=20)
    assert len(curves) == 3
    for c in curves:
        _close(start_point(c), point(0, 0))
        _close(end_point(c), point(10, 0))
        # between the fitted samples the curves stay on the arc
        for u in (0.03, 0.26, 0.5, 0.61, 0.97):
            _close(sample(c, u), sample(arc, u), tol=1e-3)


def test_identical_curves_offset():
    arc = arc3p(point(0, 0), point(5, 5), point(10, 0))
    with pytest.raises(DegenerateGeometryError):
        morph(arc, arc, 2, offset=1.0)
