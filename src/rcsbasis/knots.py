"""Knot placement for restricted cubic splines.

Knots are either supplied by the caller (validated, returned unchanged)
or placed at fixed quantiles of the observed values. Placing knots at
fixed quantiles rather than optimising them gives more stable inference.
"""

from __future__ import annotations

import logging
from typing import Sequence, Union

import numpy as np

from rcsbasis.config import (
    DEFAULT_KNOT_SCHEME,
    DEFAULT_OUTER_QUANTILES,
    HARRELL_OUTER_RANK,
    HARRELL_QUANTILES,
    HARRELL_SMALL_SAMPLE,
    MIN_KNOTS,
)
from rcsbasis.errors import InsufficientData, InvalidKnotSet

logger = logging.getLogger(__name__)

Scheme = Union[str, Sequence[float]]


def knot_quantiles(count: int, scheme: Scheme = DEFAULT_KNOT_SCHEME) -> np.ndarray:
    """
    Quantile fractions at which `count` knots are placed.

    Parameters
    ----------
    count : int
        Number of knots (>= 3).
    scheme : {"equal", "harrell"} or sequence of float
        "equal":   outer fractions 0.10 / 0.90, inner ones equally spaced.
        "harrell": the published fixed table for 3..7 knots.
        sequence:  explicit fractions, strictly increasing in [0, 1].
    """
    if count < MIN_KNOTS:
        raise InvalidKnotSet(f"Need at least {MIN_KNOTS} knots for RCS, got {count}.")

    if isinstance(scheme, str):
        if scheme == "equal":
            q_lo, q_hi = DEFAULT_OUTER_QUANTILES
            return np.linspace(q_lo, q_hi, count)
        if scheme == "harrell":
            if count not in HARRELL_QUANTILES:
                raise InvalidKnotSet(
                    f"Harrell quantile table covers {min(HARRELL_QUANTILES)}..{max(HARRELL_QUANTILES)} "
                    f"knots, got {count}."
                )
            return np.array(HARRELL_QUANTILES[count], dtype=float)
        raise ValueError(f"Unknown knot scheme {scheme!r}; use 'equal', 'harrell' or a sequence.")

    probs = np.asarray(scheme, dtype=float).ravel()
    if probs.size != count:
        raise InvalidKnotSet(f"Expected {count} quantile fractions, got {probs.size}.")
    if np.any(probs < 0.0) or np.any(probs > 1.0) or np.any(np.diff(probs) <= 0.0):
        raise InvalidKnotSet(
            f"Quantile fractions must be strictly increasing within [0, 1]: {probs.tolist()}"
        )
    return probs


def _check_explicit(explicit, count: int) -> np.ndarray:
    k = np.array(explicit, dtype=float).ravel()
    if k.size != count:
        raise InvalidKnotSet(f"Expected {count} knots, got {k.size}: {k.tolist()}")
    if not np.all(np.isfinite(k)):
        raise InvalidKnotSet(f"Knots must be finite: {k.tolist()}")
    if np.any(np.diff(k) <= 0.0):
        raise InvalidKnotSet(f"Knots must be strictly increasing: {k.tolist()}")
    return k


def select_knots(values,
                 count: int,
                 explicit=None,
                 *,
                 scheme: Scheme = DEFAULT_KNOT_SCHEME) -> np.ndarray:
    """
    Determine ordered knot positions for one variable.

    Parameters
    ----------
    values : array-like
        Observed values of the variable. Non-finite entries are ignored.
    count : int
        Number of knots K (>= 3). The spline then has K-1 degrees of freedom.
    explicit : array-like, optional
        Caller-chosen knots. Validated and returned unchanged.
    scheme : {"equal", "harrell"} or sequence of float, default "equal"
        Quantile scheme used when `explicit` is not given.

    Returns
    -------
    knots : ndarray, shape (count,)

    Raises
    ------
    InvalidKnotSet
        `count` < 3, or `explicit` is not a strictly increasing finite
        sequence of length `count`.
    InsufficientData
        Fewer than `count` distinct values, or the quantiles collapse.
    """
    count = int(count)
    if count < MIN_KNOTS:
        raise InvalidKnotSet(f"Need at least {MIN_KNOTS} knots for RCS, got {count}.")

    x = np.asarray(values, dtype=float).ravel()
    x = x[np.isfinite(x)]

    if explicit is not None:
        knots = _check_explicit(explicit, count)
        if x.size and (knots[0] < x.min() or knots[-1] > x.max()):
            logger.warning(
                "Explicit knots [%g, %g] extend beyond the observed range [%g, %g]",
                knots[0], knots[-1], x.min(), x.max(),
            )
        return knots

    probs = knot_quantiles(count, scheme)

    n_distinct = np.unique(x).size
    if n_distinct < count:
        raise InsufficientData(
            f"{count} knots need at least {count} distinct values, got {n_distinct}."
        )

    knots = np.quantile(x, probs)

    if (isinstance(scheme, str) and scheme == "harrell"
            and 2 * HARRELL_OUTER_RANK <= x.size < HARRELL_SMALL_SAMPLE):
        xs = np.sort(x)
        knots[0] = xs[HARRELL_OUTER_RANK - 1]
        knots[-1] = xs[-HARRELL_OUTER_RANK]

    if np.any(np.diff(knots) <= 0.0):
        raise InsufficientData(
            f"Quantile knots are not strictly increasing (degenerate distribution): {knots.tolist()}"
        )

    logger.debug("Selected %d knots at quantiles %s: %s", count, np.round(probs, 4).tolist(), knots.tolist())
    return knots
