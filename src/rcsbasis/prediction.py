# prediction.py
# Reconstruct fitted RCS curves from externally estimated coefficients
# -------------------------------------------------------------------
# Fitted curve:  f(x) = alpha + beta * x + sum_j theta_j * s_j(x)
# Coefficients are ordered as the basis columns: [beta, theta_1, ..., theta_{K-2}].
# No estimation happens here; every function is a linear combination.
# -------------------------------------------------------------------

from __future__ import annotations

from typing import Tuple

import numpy as np

from rcsbasis.config import DEFAULT_NORM
from rcsbasis.errors import CoefficientDimensionMismatch
from rcsbasis.rcs_basis import build_basis, norm_divisor, rcs_derivative, validate_knots


def _check_coefficients(coefficients, n_knots: int) -> np.ndarray:
    c = np.asarray(coefficients, dtype=float).ravel()
    if c.size != n_knots - 1:
        raise CoefficientDimensionMismatch(
            f"{n_knots} knots need {n_knots - 1} coefficients (linear + {n_knots - 2} nonlinear), "
            f"got {c.size}."
        )
    return c


def predict(query_values,
            knots,
            coefficients,
            intercept: float = 0.0,
            *,
            norm: int = DEFAULT_NORM) -> np.ndarray:
    """
    Evaluate the fitted curve at arbitrary query points.

    Outside [t₁, t_K] the curve continues linearly, so this doubles as the
    extrapolation rule for forecasting beyond the observed range.

    Parameters
    ----------
    query_values : array-like, shape (G,)
    knots : array-like, shape (K,)
    coefficients : array-like, shape (K-1,)
        Linear coefficient followed by the K-2 spline coefficients.
    intercept : float

    Returns
    -------
    y : ndarray, shape (G,)
    """
    k = validate_knots(knots)
    c = _check_coefficients(coefficients, k.size)
    B = build_basis(query_values, k, norm=norm)      # (G, K-1)
    return float(intercept) + B @ c


def predict_draws(query_values,
                  knots,
                  coefficient_draws,
                  intercept_draws=None,
                  *,
                  norm: int = DEFAULT_NORM) -> np.ndarray:
    """
    Evaluate the curve for every draw of a coefficient sample.

    Parameters
    ----------
    coefficient_draws : array-like, shape (D, K-1)
        One row per posterior / bootstrap draw.
    intercept_draws : array-like, shape (D,), optional

    Returns
    -------
    y : ndarray, shape (D, G)
    """
    k = validate_knots(knots)
    C = np.asarray(coefficient_draws, dtype=float)
    if C.ndim == 1:
        C = C[None, :]
    if C.ndim != 2 or C.shape[1] != k.size - 1:
        raise CoefficientDimensionMismatch(
            f"{k.size} knots need draws of shape (D, {k.size - 1}), got {C.shape}."
        )

    B = build_basis(query_values, k, norm=norm)      # (G, K-1)
    y = C @ B.T                                      # (D, G)

    if intercept_draws is not None:
        a = np.asarray(intercept_draws, dtype=float).ravel()
        if a.size != C.shape[0]:
            raise ValueError(f"Got {a.size} intercept draws for {C.shape[0]} coefficient draws.")
        y = y + a[:, None]
    return y


def predict_slope(query_values, knots, coefficients, *, norm: int = DEFAULT_NORM) -> np.ndarray:
    """
    Marginal effect df/dx of the fitted curve.

    Equals the linear coefficient below t₁ and is constant beyond t_K.
    """
    k = validate_knots(knots)
    c = _check_coefficients(coefficients, k.size)
    dZ = rcs_derivative(query_values, k, order=1, norm=norm)
    return c[0] + dZ @ c[1:]


def predict_delta(query_values, anchor: float, knots, coefficients, *, norm: int = DEFAULT_NORM) -> np.ndarray:
    """
    Anchored change f(x) - f(x0).

    Δ = beta·(x - x0) + theta·(s(x) - s(x0)); the intercept cancels, so
    only the slope and spline coefficients are needed.
    """
    k = validate_knots(knots)
    c = _check_coefficients(coefficients, k.size)
    B = build_basis(query_values, k, norm=norm)
    B0 = build_basis(np.array([anchor], dtype=float), k, norm=norm)
    return (B - B0) @ c


def restate_coefficients(knots, coefficients, *, norm: int = DEFAULT_NORM) -> Tuple[float, np.ndarray]:
    """
    Re-express a fitted RCS in truncated-power form.

    Returns ``(beta, c)`` with ``c`` of length K such that

        f(x) - alpha = beta * x + sum_i c_i * (x - t_i)₊³

    The restated hinge coefficients satisfy sum(c) = 0 and
    sum(c * t) = 0, which is what makes the curve linear beyond t_K.
    """
    k = validate_knots(knots)
    coef = _check_coefficients(coefficients, k.size)
    divisor = norm_divisor(k, norm)

    beta = float(coef[0])
    theta = coef[1:] / divisor
    inner = k[:-2]
    tail = k[-1] - k[-2]

    c = np.empty(k.size, dtype=float)
    c[:-2] = theta
    c[-2] = -np.sum(theta * (k[-1] - inner)) / tail
    c[-1] = np.sum(theta * (k[-2] - inner)) / tail
    return beta, c
