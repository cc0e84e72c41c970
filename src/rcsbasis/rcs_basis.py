# rcs_basis.py
# Restricted Cubic Spline basis evaluation and design-matrix construction
# =============================================================================
"""
RESTRICTED CUBIC SPLINES (RCS)
=============================================================================

1. WHAT THE BASIS ENCODES
-------------------------
For K knots t₁ < t₂ < ... < t_K an RCS is a piecewise cubic in x that is
twice continuously differentiable at every knot and linear outside
[t₁, t_K]. It is spanned by the linear term x plus K-2 nonlinear terms,
so a smooth effect costs K-1 degrees of freedom.

2. THE NONLINEAR TERMS
----------------------
For j = 1, ..., K-2:

    s_j(x) = [ (x - t_j)₊³
               - (x - t_{K-1})₊³ · (t_K - t_j) / (t_K - t_{K-1})
               + (x - t_K)₊³     · (t_{K-1} - t_j) / (t_K - t_{K-1}) ] / D

where (u)₊ = max(u, 0) and D is the normalisation:

    norm=0:  D = 1
    norm=1:  D = (t_K - t_{K-1})³
    norm=2:  D = (t_K - t₁)²        [default]

Properties:
  - s_j(x) = 0 for x ≤ t₁ (every hinge is inactive)
  - for x ≥ t_K the cubic and quadratic parts cancel → s_j is affine
  - each truncated cubic is C², so the sum is C² at every knot

3. REPEATED LEVELS
------------------
Longitudinal designs evaluate the basis on a handful of time points
shared across many subjects. `build_basis_unique` evaluates each level
once; `expand_unique` scatters those rows back to the full design, so
equal inputs always receive identical rows.

References
----------
- Harrell, F.E. (2015). Regression Modeling Strategies. Springer.
- Durrleman, S. & Simon, R. (1989). Flexible regression models with cubic splines.
  Statistics in Medicine, 8(5), 551-561.
"""

from __future__ import annotations

import logging
from typing import Dict

import numpy as np

from rcsbasis.config import DEFAULT_NORM, MIN_KNOTS, VALID_NORMS
from rcsbasis.errors import DegenerateKnotSpacing, InvalidKnotSet

logger = logging.getLogger(__name__)


def validate_knots(knots) -> np.ndarray:
    """
    Return `knots` as a fresh 1-D float array after checking it can carry an RCS.

    Raises
    ------
    InvalidKnotSet
        Fewer than 3 knots, non-finite entries, or not strictly increasing.
    DegenerateKnotSpacing
        t_K == t_{K-1} or t_K == t₁ (the normalisation would divide by zero).
    """
    k = np.array(knots, dtype=float).ravel()
    if k.size < MIN_KNOTS:
        raise InvalidKnotSet(f"Need at least {MIN_KNOTS} knots for RCS, got {k.size}.")
    if not np.all(np.isfinite(k)):
        raise InvalidKnotSet(f"Knots must be finite: {k.tolist()}")
    if k[-1] == k[-2] or k[-1] == k[0]:
        raise DegenerateKnotSpacing(
            f"Boundary knots coincide (t_K={k[-1]}, t_K-1={k[-2]}, t_1={k[0]})."
        )
    if np.any(np.diff(k) <= 0.0):
        raise InvalidKnotSet(f"Knots must be strictly increasing: {k.tolist()}")
    return k


def norm_divisor(k: np.ndarray, norm: int) -> float:
    if norm not in VALID_NORMS:
        raise ValueError(f"norm must be one of {VALID_NORMS}, got {norm!r}")
    if norm == 0:
        return 1.0
    if norm == 1:
        return float((k[-1] - k[-2]) ** 3)
    return float((k[-1] - k[0]) ** 2)


def _as_values(x) -> np.ndarray:
    return np.asarray(x, dtype=float).ravel()


def _cube(u: np.ndarray) -> np.ndarray:
    # (u)₊³ as an explicit product
    p = np.maximum(u, 0.0)
    return p * p * p


def rcs_design(x, knots, *, norm: int = DEFAULT_NORM) -> np.ndarray:
    """
    Compute the nonlinear block of the RCS basis.

    Parameters
    ----------
    x : array-like, shape (N,)
        Predictor values, on the same scale as the knots. NaN propagates
        to the corresponding row.
    knots : array-like, shape (K,)
        Strictly increasing knot positions, K >= 3.
    norm : {0, 1, 2}, default 2
        Normalisation of the truncated cubics (see module docstring).

    Returns
    -------
    Z : ndarray, shape (N, K-2)
        Column j-1 holds s_j(x).

    Examples
    --------
    >>> rcs_design([1.0, 9.0, 10.0], [2.0, 5.0, 9.0])[:, 0]
    array([0.        , 4.71428571, 6.        ])
    """
    k = validate_knots(knots)
    divisor = norm_divisor(k, norm)
    x = _as_values(x)

    tail = k[-1] - k[-2]
    inner = k[:-2]                                          # t_1 .. t_{K-2}
    d_j = _cube(x[:, None] - inner[None, :])                # (N, K-2)
    d_pen = _cube(x - k[-2])[:, None]                       # (N, 1)
    d_last = _cube(x - k[-1])[:, None]                      # (N, 1)

    Z = (d_j
         - d_pen * (k[-1] - inner) / tail
         + d_last * (k[-2] - inner) / tail)
    return Z / divisor


def nonlinear_term(x: float, knots, j: int, *, norm: int = DEFAULT_NORM) -> float:
    """Value of the j-th nonlinear basis term (1-based, j = 1..K-2) at a single x."""
    k = validate_knots(knots)
    if not 1 <= j <= k.size - 2:
        raise IndexError(f"j must be in 1..{k.size - 2} for {k.size} knots, got {j}")
    return float(rcs_design(np.array([x], dtype=float), k, norm=norm)[0, j - 1])


def rcs_derivative(x, knots, *, order: int = 1, norm: int = DEFAULT_NORM) -> np.ndarray:
    """
    Analytic derivative of the nonlinear RCS columns.

    Parameters
    ----------
    x : array-like, shape (N,)
        Predictor values.
    knots : array-like, shape (K,)
        Knot positions.
    order : {1, 2}
        First or second derivative.

    Returns
    -------
    dZ : ndarray, shape (N, K-2)

    Notes
    -----
    d/dx (x - t)₊³ = 3 (x - t)₊²  and  d²/dx² (x - t)₊³ = 6 (x - t)₊.
    The first derivative is constant for x ≥ t_K and the second
    derivative vanishes there (linear tail).
    """
    if order not in (1, 2):
        raise ValueError(f"order must be 1 or 2, got {order!r}")
    k = validate_knots(knots)
    divisor = norm_divisor(k, norm)
    x = _as_values(x)

    if order == 1:
        def hinge(u):
            p = np.maximum(u, 0.0)
            return 3.0 * p * p
    else:
        def hinge(u):
            return 6.0 * np.maximum(u, 0.0)

    tail = k[-1] - k[-2]
    inner = k[:-2]
    dZ = (hinge(x[:, None] - inner[None, :])
          - hinge(x - k[-2])[:, None] * (k[-1] - inner) / tail
          + hinge(x - k[-1])[:, None] * (k[-2] - inner) / tail)
    return dZ / divisor


def build_basis(values, knots, *, norm: int = DEFAULT_NORM) -> np.ndarray:
    """
    Full RCS design block: the linear term followed by the K-2 nonlinear terms.

    Returns an (N, K-1) array whose first column is `values` itself. This
    is what an OLS/GLS design matrix or a set of fixed growth loadings
    consumes verbatim.
    """
    x = _as_values(values)
    Z = rcs_design(x, knots, norm=norm)
    return np.column_stack([x, Z])


def build_basis_unique(distinct_values, knots, *, norm: int = DEFAULT_NORM) -> Dict[float, np.ndarray]:
    """
    Evaluate the basis once per distinct level.

    Returns a mapping level -> basis row (length K-1). Repeated entries in
    `distinct_values` collapse to a single key.
    """
    k = validate_knots(knots)
    x = _as_values(distinct_values)
    if not np.all(np.isfinite(x)):
        raise ValueError("Levels must be finite to be used as mapping keys.")
    levels = np.unique(x)
    B = build_basis(levels, k, norm=norm)
    logger.debug("RCS basis evaluated at %d distinct levels (%d inputs)", levels.size, x.size)
    return {float(level): B[i].copy() for i, level in enumerate(levels)}


def expand_unique(values, knots, *, norm: int = DEFAULT_NORM) -> np.ndarray:
    """
    Same result as `build_basis`, computed from the distinct levels only.

    Useful when a few time points repeat across many subjects: the cost
    scales with the number of levels, and equal inputs share one row.
    """
    k = validate_knots(knots)
    x = _as_values(values)
    levels, inverse = np.unique(x, return_inverse=True)
    B = build_basis(levels, k, norm=norm)
    logger.debug("RCS basis: %d rows expanded from %d levels", x.size, levels.size)
    return B[inverse.ravel()]
