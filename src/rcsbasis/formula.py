"""patsy stateful transform ``rcs(x, ...)`` for model formulas.

Usage::

    from rcsbasis.formula import rcs
    y, X = patsy.dmatrices("y ~ rcs(time, 4)", data)

Knots are chosen once from the data the design is built on and replayed
when the design is rebuilt for new data (``patsy.build_design_matrices``
or a fitted statsmodels result's ``predict``), so predictions use the
training knots rather than quantiles of the new data.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from patsy import stateful_transform

from rcsbasis.config import DEFAULT_KNOT_SCHEME, DEFAULT_NORM
from rcsbasis.knots import select_knots
from rcsbasis.rcs_basis import build_basis

__all__ = ["RCS", "rcs"]


class RCS(object):
    """rcs(x, nk=None, knots=None, scheme="equal", norm=2)

    Restricted cubic spline basis: the linear term plus nk-2 nonlinear
    columns. Give either the number of knots `nk` (placed at quantiles
    of x according to `scheme`) or explicit `knots`.
    """

    def __init__(self):
        self._xs = []
        self._nk = None
        self._explicit = None
        self._scheme = DEFAULT_KNOT_SCHEME
        self.knots = None

    def memorize_chunk(self, x, nk=None, knots=None, scheme=DEFAULT_KNOT_SCHEME, norm=DEFAULT_NORM):
        if (nk is None) == (knots is None):
            raise ValueError("rcs() needs exactly one of 'nk' or 'knots'")
        x = np.atleast_1d(np.asarray(x, dtype=float))
        if x.ndim > 1:
            raise ValueError("input to 'rcs' must be a 1-d vector")
        self._nk = nk
        self._explicit = knots
        self._scheme = scheme
        self._xs.append(x)

    def memorize_finish(self):
        x = np.concatenate(self._xs) if self._xs else np.array([], dtype=float)
        if self._explicit is not None:
            explicit = np.asarray(self._explicit, dtype=float).ravel()
            self.knots = select_knots(x, explicit.size, explicit)
        else:
            self.knots = select_knots(x, self._nk, scheme=self._scheme)
        # Free the training data.
        self._xs = []

    def transform(self, x, nk=None, knots=None, scheme=DEFAULT_KNOT_SCHEME, norm=DEFAULT_NORM):
        basis = build_basis(x, self.knots, norm=norm)
        if isinstance(x, pd.Series):
            return pd.DataFrame(basis, index=x.index)
        return basis


rcs = stateful_transform(RCS)
