"""Orthogonalisation of the RCS basis against the linear term.

For stable estimation (and for priors that mean the same thing on every
column) the nonlinear block Z can be projected off [1, x] and scaled to
unit variance:

    Z̃ = (Z - [1, x] · P - m) / s,   P = ([1, x]ᵀ[1, x])⁻¹ [1, x]ᵀ Z

After this the linear coefficient is the average slope and the spline
coefficients capture pure departure from linearity. The fitted
(P, m, s) are kept in a `BasisTransform` so new data goes through the
exact same sequence of operations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as np

from rcsbasis.config import DEFAULT_NORM, STD_FLOOR
from rcsbasis.rcs_basis import rcs_derivative, rcs_design

logger = logging.getLogger(__name__)


def _linear_design(x: np.ndarray) -> np.ndarray:
    return np.column_stack([np.ones_like(x), x])


@dataclass(frozen=True)
class BasisTransform:
    """Saved projection, centring and scaling for an RCS nonlinear block."""

    proj_coef: np.ndarray  # (2, m) rows: intercept, slope
    col_means: np.ndarray  # (m,)
    col_stds: np.ndarray   # (m,)
    norm: int = DEFAULT_NORM

    def __post_init__(self) -> None:
        p = np.asarray(self.proj_coef, dtype=float)
        means = np.asarray(self.col_means, dtype=float).ravel()
        stds = np.asarray(self.col_stds, dtype=float).ravel()
        if p.ndim != 2 or p.shape[0] != 2:
            raise ValueError(f"proj_coef must have shape (2, m), got {p.shape}.")
        if means.size != p.shape[1] or stds.size != p.shape[1]:
            raise ValueError("col_means and col_stds must have one entry per basis column.")
        if np.any(stds <= 0.0):
            raise ValueError("col_stds must be positive.")
        object.__setattr__(self, "proj_coef", p)
        object.__setattr__(self, "col_means", means)
        object.__setattr__(self, "col_stds", stds)

    @property
    def n_columns(self) -> int:
        return int(self.proj_coef.shape[1])

    def apply(self, x_new, knots) -> np.ndarray:
        """Transformed RCS block for new data, shape (N, m)."""
        x = np.asarray(x_new, dtype=float).ravel()
        Z_raw = rcs_design(x, knots, norm=self.norm)
        if Z_raw.shape[1] != self.n_columns:
            raise ValueError(
                f"Transform was fitted on {self.n_columns} columns; knots give {Z_raw.shape[1]}."
            )
        Z_resid = Z_raw - _linear_design(x) @ self.proj_coef
        return (Z_resid - self.col_means) / self.col_stds

    def derivative(self, x_new, knots) -> np.ndarray:
        """
        d Z̃ / dx for new data, shape (N, m).

        The intercept column has zero derivative, so only the slope row of
        the projection survives: (dZ/dx - P[1, :]) / s.
        """
        dZ_raw = rcs_derivative(x_new, knots, order=1, norm=self.norm)
        return (dZ_raw - self.proj_coef[1, :][None, :]) / self.col_stds

    def slope(self, x_new, knots, beta: float, theta) -> np.ndarray:
        """Marginal effect beta + theta · dZ̃/dx of a curve fitted on the transformed block."""
        theta = np.asarray(theta, dtype=float).ravel()
        if theta.size != self.n_columns:
            raise ValueError(f"Expected {self.n_columns} spline coefficients, got {theta.size}.")
        return float(beta) + self.derivative(x_new, knots) @ theta

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proj_coef": self.proj_coef.tolist(),
            "col_means": self.col_means.tolist(),
            "col_stds": self.col_stds.tolist(),
            "norm": int(self.norm),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BasisTransform":
        return cls(
            proj_coef=np.asarray(d["proj_coef"], dtype=float),
            col_means=np.asarray(d["col_means"], dtype=float),
            col_stds=np.asarray(d["col_stds"], dtype=float),
            norm=int(d.get("norm", DEFAULT_NORM)),
        )


def orthonormalize_basis(x,
                         knots,
                         *,
                         standardize: bool = True,
                         norm: int = DEFAULT_NORM) -> Tuple[np.ndarray, BasisTransform]:
    """
    Build the RCS block for `x`, orthogonalise it to [1, x] and optionally standardise.

    Parameters
    ----------
    x : array-like, shape (N,)
        Training values of the predictor.
    knots : array-like, shape (K,)
    standardize : bool, default True
        Scale columns to unit variance. Columns whose SD is below
        `config.STD_FLOOR` are left unscaled.

    Returns
    -------
    Z_ortho : ndarray, shape (N, K-2)
    transform : BasisTransform
        Replays the same operations on new data via `transform.apply`.
    """
    x = np.asarray(x, dtype=float).ravel()
    if not np.all(np.isfinite(x)):
        raise ValueError("x must be finite to orthogonalise the basis.")
    Z = rcs_design(x, knots, norm=norm)
    X_linear = _linear_design(x)

    proj_coef = np.linalg.lstsq(X_linear, Z, rcond=None)[0]
    Z_resid = Z - X_linear @ proj_coef

    col_means = Z_resid.mean(axis=0)
    Z_centered = Z_resid - col_means

    if standardize:
        col_stds = Z_centered.std(axis=0, ddof=1)
        flat = col_stds < STD_FLOOR
        if np.any(flat):
            logger.warning("RCS columns %s are (nearly) linear in x; left unscaled",
                           (np.flatnonzero(flat) + 1).tolist())
        col_stds = np.where(flat, 1.0, col_stds)
    else:
        col_stds = np.ones(Z.shape[1])

    transform = BasisTransform(proj_coef=proj_coef, col_means=col_means, col_stds=col_stds, norm=norm)
    return Z_centered / col_stds, transform
