from __future__ import annotations

import logging

import numpy as np
import pytest

from rcsbasis.diagnostics import check_knot_coverage, verify_orthogonality
from rcsbasis.knots import select_knots
from rcsbasis.rcs_basis import rcs_design
from rcsbasis.transform import BasisTransform, orthonormalize_basis


def test_orthonormalized_basis_is_orthogonal_and_unit_variance(rng: np.random.Generator) -> None:
    x = rng.normal(size=800)
    knots = select_knots(x, 5)
    Z, transform = orthonormalize_basis(x, knots)

    assert Z.shape == (800, 3)
    result = verify_orthogonality(Z, x)
    assert result["is_orthogonal"]
    assert result["inner_product_matrix"].shape == (2, 3)
    np.testing.assert_allclose(Z.std(axis=0, ddof=1), 1.0)
    assert transform.n_columns == 3


def test_raw_basis_is_not_orthogonal(rng: np.random.Generator) -> None:
    x = rng.normal(size=800)
    knots = select_knots(x, 4)
    result = verify_orthogonality(rcs_design(x, knots), x)
    assert not result["is_orthogonal"]


def test_transform_replays_on_training_data(rng: np.random.Generator) -> None:
    x = rng.uniform(-1.0, 3.0, 500)
    knots = select_knots(x, 4)
    Z, transform = orthonormalize_basis(x, knots)
    np.testing.assert_allclose(transform.apply(x, knots), Z, atol=1e-12)


def test_unstandardized_transform_keeps_scale(rng: np.random.Generator) -> None:
    x = rng.uniform(0.0, 10.0, 300)
    knots = select_knots(x, 4)
    Z, transform = orthonormalize_basis(x, knots, standardize=False)
    np.testing.assert_array_equal(transform.col_stds, np.ones(2))
    np.testing.assert_allclose(Z.mean(axis=0), 0.0, atol=1e-12)


def test_transform_slope_matches_numerical_derivative(rng: np.random.Generator) -> None:
    x = rng.uniform(0.0, 10.0, 400)
    knots = select_knots(x, 5)
    _, transform = orthonormalize_basis(x, knots)
    beta, theta = 0.7, np.array([0.3, -0.2, 0.5])

    grid = np.linspace(-1.0, 11.0, 31) + 0.01
    h = 1e-5

    def curve(q):
        return beta * q + transform.apply(q, knots) @ theta

    num = (curve(grid + h) - curve(grid - h)) / (2 * h)
    np.testing.assert_allclose(transform.slope(grid, knots, beta, theta), num, rtol=1e-6, atol=1e-6)


def test_transform_rejects_mismatched_knots(rng: np.random.Generator) -> None:
    x = rng.uniform(0.0, 10.0, 200)
    _, transform = orthonormalize_basis(x, select_knots(x, 4))
    with pytest.raises(ValueError, match="fitted on 2 columns"):
        transform.apply(x, select_knots(x, 5))


def test_transform_dict_round_trip(rng: np.random.Generator) -> None:
    x = rng.uniform(0.0, 10.0, 200)
    knots = select_knots(x, 4)
    _, transform = orthonormalize_basis(x, knots, norm=0)
    restored = BasisTransform.from_dict(transform.to_dict())
    assert restored.norm == 0
    np.testing.assert_allclose(restored.apply(x, knots), transform.apply(x, knots))


def test_transform_validates_shapes() -> None:
    with pytest.raises(ValueError, match="shape"):
        BasisTransform(proj_coef=np.zeros((3, 2)), col_means=np.zeros(2), col_stds=np.ones(2))
    with pytest.raises(ValueError, match="positive"):
        BasisTransform(proj_coef=np.zeros((2, 2)), col_means=np.zeros(2), col_stds=np.zeros(2))


def test_knot_coverage_counts_tail_observations(caplog: pytest.LogCaptureFixture) -> None:
    x = np.arange(100.0)
    with caplog.at_level(logging.WARNING, logger="rcsbasis.diagnostics"):
        coverage = check_knot_coverage(x, [10.0, 50.0, 89.0])

    assert coverage["n_observations"] == 100
    assert coverage["n_below_boundary"] == 10
    assert coverage["n_above_boundary"] == 10
    assert coverage["pct_extrapolation"] == pytest.approx(20.0)
    assert coverage["knot_range"] == (10.0, 89.0)
    assert "High extrapolation" in coverage["warning"]
    assert "High extrapolation" in caplog.text


def test_knot_coverage_without_warning() -> None:
    coverage = check_knot_coverage(np.arange(100.0), [2.0, 50.0, 97.0])
    assert coverage["pct_extrapolation"] == pytest.approx(4.0)
    assert coverage["warning"] == ""
