## foundational geometry for rebarCAD
## derived from the yapCAD geom module
## Copyright (c) 2020 Richard DeVaul

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
# 
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
# 
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""foundational geometry for **rebarCAD**

====================
OVERVIEW
====================

The rebarcad.geom module provides the scalar, vector, point, line and
arc operations that every other rebarCAD module is built on.

vectors and points
==================

Vectors are lists of four numbers, ``[x,y,z,w]``.  Points are vectors
with ``w > 0`` (normally ``w == 1``); directions produced by
:func:`unit`, :func:`cross` and friends carry ``w == 0``.  Like the
rest of rebarCAD, the three dimensional operations ignore the w
coordinate.

lines
=====

Lines are lists of two points, parameterized over ``0 <= u <= 1``.
Sampling outside that interval stays on the infinite line, which is
what trimming and extending rely on.

arcs
====

Arcs are three dimensional circular arcs stored as
``['arc', center, meta]`` where ``meta`` holds the radius, the in-plane
basis (``x_axis`` pointing at the start point, ``y_axis`` completing a
right-handed frame with ``normal``) and the signed ``sweep`` in
radians.  Arcs are usually made with :func:`arc3p` from a start, an
interior and an end point.

"""

from copy import deepcopy
from math import acos, atan2, cos, degrees, pi, sin, sqrt

from rebarcad.errors import DegenerateGeometryError

## constants
epsilon = 0.000005
pi2 = 2.0 * pi


## operations on scalars
## ---------------------

def isgoodnum(n):
    """ determine if an argument is actually a scalar number, and not boolean
    """
    return (not isinstance(n, bool)) and isinstance(n, (int, float))


def close(a, b, tol=epsilon):
    """ are two scalars the same within ``tol``
    """
    return abs(a - b) < tol


## operations on vectors
## ---------------------

def vect(a=False, b=False, c=False, d=False):
    """Convenience function for making a homogeneous coordinates 4 vector
from practically anything
    """
    r = [0, 0, 0, 1]
    if isgoodnum(a):
        r[0] = a
        if isgoodnum(b):
            r[1] = b
            if isgoodnum(c):
                r[2] = c
                if isgoodnum(d):
                    r[3] = d
    elif isinstance(a, (tuple, list)):
        for i in range(min(4, len(a))):
            x = a[i]
            if isgoodnum(x):
                r[i] = x
    return r


def isvect(x):
    """
    check to see if argument is a proper vector for our purposes
    """
    return isinstance(x, list) and len(x) == 4 and all(isgoodnum(c) for c in x)


def add(a, b):
    """ 3 vector, `a + b`"""
    return [a[0] + b[0], a[1] + b[1], a[2] + b[2], 1.0]


def sub(a, b):
    """ 3 vector, `a - b`"""
    return [a[0] - b[0], a[1] - b[1], a[2] - b[2], 1.0]


def scale3(a, c):
    """ 3 vector, vector ``a`` times scalar ``c``, `a * c`"""
    return [a[0] * c, a[1] * c, a[2] * c, 1.0]


def cross(a, b):
    """ 3 vector cross product ``a`` x ``b``, returned as a direction"""
    return [a[1] * b[2] - a[2] * b[1],
            a[2] * b[0] - a[0] * b[2],
            a[0] * b[1] - a[1] * b[0],
            0.0]


def dot(a, b):
    """ 3 vector ``a`` dot ``b`` """
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def mag(a):
    """ compute the magnitude of 3 vector ``a``"""
    return sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])


def dist(a, b):
    """ compute the euclidean distance between two 3 vector points ``a`` and ``b``"""
    return mag(sub(a, b))


def vclose(a, b, tol=epsilon):
    """ are two points the same, to within ``tol``"""
    return dist(a, b) < tol


def unit(a):
    """return the unit direction of ``a``, or raise
    ``DegenerateGeometryError`` for a zero length vector"""
    m = mag(a)
    if m < 1e-12:
        raise DegenerateGeometryError('cannot normalize a zero length vector')
    return [a[0] / m, a[1] / m, a[2] / m, 0.0]


def reverse_vector(a):
    """ the opposite direction of ``a``"""
    return [-a[0], -a[1], -a[2], 0.0]


def angle_between(a, b):
    """ angle between two directions, in degrees, in ``[0, 180]``"""
    c = dot(unit(a), unit(b))
    c = max(-1.0, min(1.0, c))
    return degrees(acos(c))


## operations on points
## --------------------

def point(x=False, y=False, z=False, w=False):
    """Point creation from a point, a coordinate sequence or scalars"""
    if ispoint(x):
        return deepcopy(x)
    if isinstance(x, (list, tuple)):
        if len(x) < 2 or not all(isgoodnum(c) for c in x[:3]):
            raise ValueError('bad coordinate sequence passed to point()')
        z = float(x[2]) if len(x) > 2 else 0.0
        return [float(x[0]), float(x[1]), z, 1.0]
    r = [0, 0, 0, 1]
    if isgoodnum(x):
        r[0] = x
        if isgoodnum(y):
            r[1] = y
            if isgoodnum(z):
                r[2] = z
                if isgoodnum(w):
                    r[3] = w
    if r[3] > 0:
        return r
    else:
        raise ValueError('bad w argument to point()')


def ispoint(x):
    """ is it a point?"""
    return isvect(x) and x[3] > 0.0


def lerp(a, b, u):
    """ linear blend between points ``a`` and ``b``"""
    p = 1.0 - u
    return [a[0] * p + b[0] * u, a[1] * p + b[1] * u, a[2] * p + b[2] * u, 1.0]


def vstr(a):
    """ short string form of a point or vector"""
    return '[{:.6g}, {:.6g}, {:.6g}]'.format(a[0], a[1], a[2])


## operations on lines
## -------------------

## lines are defined as lists of two points, i.e. [point(x1,y1,z1),
## point(x2,y2,z2)]

def line(p1, p2=False):
    """Value-safe line creation"""
    if isline(p1):
        return deepcopy(p1)
    elif p2 is not False:
        return [point(p1), point(p2)]
    else:
        raise ValueError('bad values passed to line()')


def line_by_direction(p, direction, length):
    """line starting at ``p`` running ``length`` along ``direction``"""
    d = unit(direction)
    return [point(p), add(p, scale3(d, length))]


def isline(l):
    """ is it a line? """
    return isinstance(l, list) and len(l) == 2 \
        and ispoint(l[0]) and ispoint(l[1])


def linelength(l):
    """ return the length of a line"""
    return dist(l[0], l[1])


def sampleline(l, u):
    """Sample a parameterized line ``l``.  Values `0 <= u <= 1.0` will
    fall within the line segment, values `u < 0` and `u > 1` will fall
    outside the line segment.

    """
    return lerp(l[0], l[1], u)


def segmentline(l, u1, u2):
    """slice out a parameterized segment from a line and return this as a new line segment"""
    return [sampleline(l, u1), sampleline(l, u2)]


def unsampleline(l, p):
    """
    return the parameter of the point on the infinite line ``l`` closest
    to ``p``
    """
    v1 = sub(l[1], l[0])
    len2 = dot(v1, v1)
    if len2 < 1e-24:
        return 0.0
    return dot(sub(p, l[0]), v1) / len2


## operations on arcs
## ------------------

def arc3p(a, m, b):
    """arc starting at ``a``, passing through ``m`` and ending at ``b``.

    Raises ``DegenerateGeometryError`` when the three points are
    collinear (or coincident), since no circle passes through them.
    """
    a = point(a)
    m = point(m)
    b = point(b)
    # circumcenter relative to m
    u = sub(a, m)
    v = sub(b, m)
    uxv = cross(u, v)
    denom = 2.0 * dot(uxv, uxv)
    scale = max(dot(u, u), dot(v, v), 1e-300)
    if denom < 1e-14 * scale * scale:
        raise DegenerateGeometryError('cannot build an arc through collinear points')
    w = sub(scale3(v, dot(u, u)), scale3(u, dot(v, v)))
    c = add(m, scale3(cross(w, uxv), 1.0 / denom))

    normal = unit(cross(sub(m, a), sub(b, m)))
    x_axis = unit(sub(a, c))
    y_axis = cross(normal, x_axis)
    radius = dist(a, c)

    sweep = _arcangle(c, x_axis, y_axis, b)
    return ['arc', c, {'radius': radius,
                       'x_axis': x_axis,
                       'y_axis': y_axis,
                       'normal': normal,
                       'sweep': sweep}]


def _arcangle(c, x_axis, y_axis, p):
    d = sub(p, c)
    ang = atan2(dot(d, y_axis), dot(d, x_axis))
    if ang < 0.0:
        ang += pi2
    return ang


def isarc(a):
    """ is it an arc? """
    return isinstance(a, list) and len(a) == 3 and a[0] == 'arc' \
        and ispoint(a[1]) and isinstance(a[2], dict) and 'sweep' in a[2]


def arclength(c):
    """return scalar length of an arc"""
    return c[2]['radius'] * abs(c[2]['sweep'])


def samplearc(c, u):
    """sample the arc ``c`` at parameter ``u``; values outside ``[0,1]``
    continue around the circle"""
    meta = c[2]
    theta = meta['sweep'] * u
    r = meta['radius']
    q = add(scale3(meta['x_axis'], r * cos(theta)),
            scale3(meta['y_axis'], r * sin(theta)))
    return add(c[1], q)


def segmentarc(c, u1, u2):
    """
    Given an arc paramaterized on a 0,1 interval, return a new arc with
    the same center and radius spanning the interval u1,u2
    """
    meta = c[2]
    theta = meta['sweep'] * u1
    x_axis = add(scale3(meta['x_axis'], cos(theta)), scale3(meta['y_axis'], sin(theta)))
    x_axis[3] = 0.0
    y_axis = cross(meta['normal'], x_axis)
    return ['arc', point(c[1]), {'radius': meta['radius'],
                                 'x_axis': x_axis,
                                 'y_axis': y_axis,
                                 'normal': list(meta['normal']),
                                 'sweep': meta['sweep'] * (u2 - u1)}]


def reversearc(c):
    """ the same arc traversed from its end to its start"""
    r = segmentarc(c, 1.0, 0.0)
    return r


def unsamplearc(c, p):
    """
    parameter of the point on the arc's circle closest to ``p``, measured
    in sweeps from the start (so it can be negative or exceed 1)
    """
    meta = c[2]
    d = sub(p, c[1])
    ang = atan2(dot(d, meta['y_axis']), dot(d, meta['x_axis']))
    sweep = meta['sweep']
    if sweep >= 0.0:
        if ang < 0.0:
            ang += pi2
    else:
        if ang > 0.0:
            ang -= pi2
    u = ang / sweep
    # points past the end of the arc are nearer to one endpoint or the other
    if u > 1.0:
        gap_end = (u - 1.0) * abs(sweep)
        gap_start = pi2 - u * abs(sweep)
        if gap_start < gap_end:
            u = -gap_start / abs(sweep)
    return u


def translatearc(c, delta):
    """ translated copy of an arc"""
    meta = deepcopy(c[2])
    return ['arc', add(c[1], delta), meta]


__all__ = [
    'epsilon', 'pi2',
    'isgoodnum', 'close',
    'vect', 'isvect', 'add', 'sub', 'scale3', 'cross', 'dot', 'mag', 'dist',
    'vclose', 'unit', 'reverse_vector', 'angle_between',
    'point', 'ispoint', 'lerp', 'vstr',
    'line', 'line_by_direction', 'isline', 'linelength', 'sampleline',
    'segmentline', 'unsampleline',
    'arc3p', 'isarc', 'arclength', 'samplearc', 'segmentarc', 'reversearc',
    'unsamplearc', 'translatearc',
]
