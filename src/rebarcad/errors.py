"""Exceptions raised by rebarCAD.

All errors derive from :class:`RebarError`, which is itself a
``ValueError`` so that callers written against the plain geometry
functions (which raise ``ValueError`` for malformed input) keep working.
"""


class RebarError(ValueError):
    """Base class for rebarCAD errors."""


class PreconditionError(RebarError):
    """An argument violates a documented precondition.

    Raised for zero division counts, missing curves, empty boundary lists
    and similar caller mistakes.  These are never retried.
    """


class DegenerateGeometryError(RebarError):
    """Geometry collapses so that the requested construction is undefined.

    Examples are an arc through three collinear points or a surface
    normal evaluated where both partial derivatives are parallel.
    """


class ParametrizationError(RebarError):
    """A surface outline cannot be sorted into two pairs of opposite sides."""

    def __init__(self, message="Cannot parametrize surface, try increasing the tolerance.", curves=None):
        super().__init__(message)
        self.curves = list(curves or [])


__all__ = [
    'RebarError',
    'PreconditionError',
    'DegenerateGeometryError',
    'ParametrizationError',
]
