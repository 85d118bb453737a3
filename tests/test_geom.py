import math

import pytest

from rebarcad.errors import DegenerateGeometryError
from rebarcad.geom import *
## unit tests for rebarCAD geom.py


class TestPoint:
    """unit tests for rebarCAD point functions"""

    def test_create(self):
        a = point(5, 0)
        b = point(0, 5, -2)
        c = point([1, 2])
        d = point((1.5, 2.5, 3.5))
        assert a == [5, 0, 0, 1]
        assert b == [0, 5, -2, 1]
        assert c == [1.0, 2.0, 0.0, 1.0]
        assert d == [1.5, 2.5, 3.5, 1.0]
        assert point(b) is not b and point(b) == b

    def test_discriminate(self):
        assert ispoint(point(1, 2))
        assert not ispoint(vect(1, 2, 3, 0))
        assert not ispoint([1, 2])
        with pytest.raises(ValueError):
            point([1])

    def test_lerp(self):
        assert vclose(lerp(point(0, 0), point(10, 4), 0.25), point(2.5, 1))


class TestOperations:
    def test_vect(self):
        a = point(5, 0)
        b = point(0, 5)
        assert close(mag(a), 5.0)
        assert vclose(add(a, b), point(5, 5))
        assert vclose(sub(a, b), point(5, -5))
        assert close(dot(a, b), 0)
        assert vclose(cross(a, b), point(0, 0, 25))
        assert cross(a, b)[3] == 0.0
        assert close(dist(a, b), math.sqrt(50))

    def test_unit(self):
        u = unit(point(3, 4, 0))
        assert close(u[0], 0.6) and close(u[1], 0.8)
        assert u[3] == 0.0
        with pytest.raises(DegenerateGeometryError):
            unit(point(0, 0, 0))

    def test_angle_between(self):
        assert close(angle_between(point(1, 0), point(0, 1)), 90.0)
        assert close(angle_between(point(1, 0), point(-2, 0)), 180.0)
        assert close(angle_between(point(1, 1), point(2, 2)), 0.0)
        assert vclose(reverse_vector(point(1, -2, 3)), point(-1, 2, -3))


class TestLine:
    def test_create(self):
        a = point(5, 0)
        b = point(0, 5)
        l = line(a, b)
        assert isline(l)
        assert line(l) == l and line(l) is not l
        assert close(linelength(l), math.sqrt(50))

    def test_sample_outside(self):
        l = line(point(0, 0), point(10, 0))
        assert vclose(sampleline(l, 0.5), point(5, 0))
        assert vclose(sampleline(l, -0.2), point(-2, 0))
        assert vclose(sampleline(l, 1.5), point(15, 0))
        assert close(unsampleline(l, point(3, 7)), 0.3)

    def test_segment(self):
        l = line(point(0, 0), point(10, 0))
        s = segmentline(l, 0.2, 0.6)
        assert vclose(s[0], point(2, 0))
        assert vclose(s[1], point(6, 0))

    def test_by_direction(self):
        l = line_by_direction(point(1, 1, 1), vect(0, 0, 2, 0), 5.0)
        assert vclose(l[1], point(1, 1, 6))


class TestArc:
    def _half_circle(self):
        return arc3p(point(1, 0), point(0, 1), point(-1, 0))

    def test_three_points(self):
        c = self._half_circle()
        assert isarc(c)
        assert vclose(c[1], point(0, 0))
        assert close(c[2]['radius'], 1.0)
        assert close(c[2]['sweep'], math.pi)
        assert close(arclength(c), math.pi)
        assert vclose(samplearc(c, 0.0), point(1, 0))
        assert vclose(samplearc(c, 0.5), point(0, 1))
        assert vclose(samplearc(c, 1.0), point(-1, 0))

    def test_clockwise(self):
        c = arc3p(point(1, 0), point(0, -1), point(-1, 0))
        assert vclose(c[1], point(0, 0))
        assert close(arclength(c), math.pi)
        assert vclose(samplearc(c, 0.5), point(0, -1))

    def test_collinear(self):
        with pytest.raises(DegenerateGeometryError):
            arc3p(point(0, 0), point(1, 1), point(2, 2))
        with pytest.raises(DegenerateGeometryError):
            arc3p(point(0, 0), point(0, 0), point(2, 2))

    def test_segment_and_reverse(self):
        c = self._half_circle()
        s = segmentarc(c, 0.5, 1.0)
        assert vclose(samplearc(s, 0.0), point(0, 1))
        assert vclose(samplearc(s, 1.0), point(-1, 0))
        r = reversearc(c)
        assert vclose(samplearc(r, 0.0), point(-1, 0))
        assert vclose(samplearc(r, 0.5), point(0, 1))
        assert vclose(samplearc(r, 1.0), point(1, 0))

    def test_unsample(self):
        c = self._half_circle()
        assert close(unsamplearc(c, point(0, 3)), 0.5)
        # just past the start maps to a small negative parameter
        p = point(math.cos(-0.1), math.sin(-0.1))
        assert close(unsamplearc(c, p), -0.1 / math.pi)

    def test_translate(self):
        c = translatearc(self._half_circle(), vect(0, 0, 2, 0))
        assert vclose(samplearc(c, 0.5), point(0, 1, 2))
