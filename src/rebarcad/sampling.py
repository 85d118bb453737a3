"""Point sampling helpers shared by the rebar generators.

``divide`` turns a curve into evenly spaced parameter samples, the
sample matrices built from those points are rearranged with
``transpose``, and ``remove_duplicates`` tidies the intersection
parameters found along a ray.
"""

import logging

from rebarcad.curves import iscurve, sample
from rebarcad.errors import PreconditionError
from rebarcad.geom import isgoodnum

logger = logging.getLogger(__name__)


def divide(curve, n):
    """Sample ``curve`` at the ``n + 1`` parameters ``i / n``.

    The first point is the curve's start and the last its end.  ``n``
    must be a positive integer.
    """
    if curve is None or not iscurve(curve):
        raise PreconditionError('divide() needs a curve')
    if isinstance(n, bool) or not isinstance(n, int) or n < 1:
        raise PreconditionError('division count must be an integer >= 1, got {!r}'.format(n))
    return [sample(curve, i / n) for i in range(n + 1)]


def transpose(matrix):
    """Column-major copy of a rectangular matrix of samples.

    ``transpose(m)[j][i] == m[i][j]``.  Empty or ragged matrices are
    rejected.
    """
    if not matrix or not matrix[0]:
        raise PreconditionError('cannot transpose an empty sample matrix')
    width = len(matrix[0])
    for row in matrix:
        if len(row) != width:
            raise PreconditionError('sample matrix rows must all have the same length')
    return [[row[j] for row in matrix] for j in range(width)]


def remove_duplicates(params):
    """Collapse the intersection parameters found along a ray.

    A single parameter passes through and a pair collapses to its first
    value.  Three or more parameters are returned unchanged.
    """
    params = list(params)
    for p in params:
        if not isgoodnum(p):
            raise PreconditionError('parameters must be numbers')
    if len(params) == 2:
        logger.debug('collapsing parameter pair %r to %r', params, params[0])
        return params[:1]
    return params


__all__ = ['divide', 'transpose', 'remove_duplicates']
