# diagnostics.py
# =============================================================================
# Checks on knot placement and basis orthogonality
# =============================================================================

from __future__ import annotations

import logging
from typing import Dict

import numpy as np

from rcsbasis.config import EXTRAPOLATION_WARN_PCT, ORTHO_TOL
from rcsbasis.rcs_basis import validate_knots

logger = logging.getLogger(__name__)


def check_knot_coverage(values, knots, *, warn_pct: float = EXTRAPOLATION_WARN_PCT) -> Dict:
    """
    Check how well knots cover the data distribution.

    Observations outside [t₁, t_K] sit on the linear tails; a large share
    of them means the boundary knots are too far inside the data.
    """
    x = np.asarray(values, dtype=float).ravel()
    x = x[np.isfinite(x)]
    k = validate_knots(knots)
    if x.size == 0:
        raise ValueError("No finite values to check knot coverage against.")

    n_below = int(np.sum(x < k[0]))
    n_above = int(np.sum(x > k[-1]))
    n_total = int(x.size)

    coverage = {
        "n_observations": n_total,
        "n_below_boundary": n_below,
        "n_above_boundary": n_above,
        "pct_extrapolation": 100.0 * (n_below + n_above) / n_total,
        "x_range": (float(x.min()), float(x.max())),
        "knot_range": (float(k[0]), float(k[-1])),
        "warning": "",
    }

    if coverage["pct_extrapolation"] > warn_pct:
        coverage["warning"] = ("High extrapolation fraction ({:.1f}%). "
                               "Consider adjusting boundary quantiles.".format(
                               coverage["pct_extrapolation"]))
        logger.warning(coverage["warning"])

    return coverage


def verify_orthogonality(Z_ortho, x, tol: float = ORTHO_TOL) -> Dict:
    """
    Verify that a transformed basis is orthogonal to [1, x].

    Parameters
    ----------
    Z_ortho : ndarray, shape (N, m)
        Output of `orthonormalize_basis`.
    x : array-like, shape (N,)
        The predictor values Z_ortho was built from.
    tol : float
        Largest allowed |<column, Z_j>| / N.
    """
    Z = np.asarray(Z_ortho, dtype=float)
    x = np.asarray(x, dtype=float).ravel()
    if Z.ndim != 2 or Z.shape[0] != x.size:
        raise ValueError(f"Z_ortho rows ({Z.shape}) must match x ({x.size}).")

    X_linear = np.column_stack([np.ones_like(x), x])
    inner_products = X_linear.T @ Z / x.size

    max_inner = float(np.abs(inner_products).max()) if inner_products.size else 0.0

    return {
        "max_inner_product": max_inner,
        "is_orthogonal": max_inner < tol,
        "tolerance": tol,
        "inner_product_matrix": inner_products,
    }
