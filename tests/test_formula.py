from __future__ import annotations

import numpy as np
import pandas as pd
import patsy
import pytest

from rcsbasis.formula import rcs
from rcsbasis.knots import select_knots
from rcsbasis.rcs_basis import build_basis


def test_direct_call_selects_knots_from_data(rng: np.random.Generator) -> None:
    x = rng.uniform(0.0, 10.0, 300)
    B = rcs(x, 4)
    np.testing.assert_array_equal(B, build_basis(x, select_knots(x, 4)))


def test_direct_call_with_explicit_knots() -> None:
    x = np.linspace(0.0, 10.0, 21)
    B = rcs(x, knots=[2.0, 5.0, 9.0])
    assert B.shape == (21, 2)
    np.testing.assert_array_equal(B, build_basis(x, [2.0, 5.0, 9.0]))


@pytest.mark.parametrize("kwargs", [{}, {"nk": 4, "knots": [1.0, 2.0, 3.0, 4.0]}])
def test_needs_exactly_one_of_nk_or_knots(kwargs) -> None:
    with pytest.raises(ValueError, match="exactly one"):
        rcs(np.arange(20.0), **kwargs)


def test_series_input_keeps_index() -> None:
    s = pd.Series(np.linspace(0.0, 10.0, 30), index=np.arange(100, 130))
    out = rcs(s, 3)
    assert isinstance(out, pd.DataFrame)
    assert out.index.equals(s.index)


def test_formula_design_reuses_training_knots(rng: np.random.Generator) -> None:
    train = pd.DataFrame({"x": rng.uniform(0.0, 10.0, 400)})
    new = pd.DataFrame({"x": np.array([-3.0, 0.5, 5.0, 12.0, 20.0])})

    X = patsy.dmatrix("rcs(x, 5)", train)
    assert X.shape == (400, 5)  # intercept + linear + 3 spline terms

    knots = select_knots(train["x"], 5)
    np.testing.assert_allclose(np.asarray(X)[:, 1:], build_basis(train["x"], knots))

    (X_new,) = patsy.build_design_matrices([X.design_info], new)
    np.testing.assert_allclose(np.asarray(X_new)[:, 1:], build_basis(new["x"], knots))
