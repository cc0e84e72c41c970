"""
rcsbasis: Restricted Cubic Spline bases for regression and growth models

Knot selection, basis construction and prediction reconstruction for
Harrell's restricted cubic splines. Fitting is left to statsmodels, SEM
software or a Bayesian sampler; this package builds what they consume.
"""

__version__ = "0.1.0"

from rcsbasis.errors import (
    CoefficientDimensionMismatch,
    DegenerateKnotSpacing,
    InsufficientData,
    InvalidKnotSet,
    RCSError,
)
from rcsbasis.knots import knot_quantiles, select_knots
from rcsbasis.rcs_basis import (
    build_basis,
    build_basis_unique,
    expand_unique,
    nonlinear_term,
    rcs_derivative,
    rcs_design,
    validate_knots,
)
from rcsbasis.prediction import (
    predict,
    predict_delta,
    predict_draws,
    predict_slope,
    restate_coefficients,
)
from rcsbasis.transform import BasisTransform, orthonormalize_basis
from rcsbasis.diagnostics import check_knot_coverage, verify_orthogonality
from rcsbasis.frame import add_rcs_columns, loadings_table
from rcsbasis.io import load_spline_params, save_spline_params

__all__ = [
    "RCSError",
    "InvalidKnotSet",
    "InsufficientData",
    "DegenerateKnotSpacing",
    "CoefficientDimensionMismatch",
    "select_knots",
    "knot_quantiles",
    "validate_knots",
    "nonlinear_term",
    "rcs_design",
    "rcs_derivative",
    "build_basis",
    "build_basis_unique",
    "expand_unique",
    "predict",
    "predict_draws",
    "predict_slope",
    "predict_delta",
    "restate_coefficients",
    "BasisTransform",
    "orthonormalize_basis",
    "check_knot_coverage",
    "verify_orthogonality",
    "add_rcs_columns",
    "loadings_table",
    "save_spline_params",
    "load_spline_params",
]
