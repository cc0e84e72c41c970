"""Exceptions raised by rcsbasis.

All errors are input-validation failures detected before any basis
values are computed. They derive from ``ValueError`` so callers that
already guard numeric code with ``except ValueError`` keep working.
"""


class RCSError(ValueError):
    """Base class for restricted cubic spline errors."""

    pass


class InvalidKnotSet(RCSError):
    """Knots are malformed: too few, non-finite, unordered or wrong count."""

    pass


class InsufficientData(RCSError):
    """Too few distinct values to place knots, or degenerate quantiles."""

    pass


class DegenerateKnotSpacing(RCSError):
    """Boundary knots coincide, so the basis normalisation divides by zero."""

    pass


class CoefficientDimensionMismatch(RCSError):
    """Coefficient vector length does not match the basis (k - 1)."""

    pass
