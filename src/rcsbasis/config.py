# config.py
# Centralized numeric defaults for the rcsbasis package
# -------------------------------------------------------------------
# Every public function takes these as explicit keyword arguments;
# the values below are only the defaults.
# -------------------------------------------------------------------

# =====================================================================
# Knot Placement
# =====================================================================
# Outer knots at the 10th / 90th percentile; inner knots equally
# spaced in quantile space between them.
DEFAULT_OUTER_QUANTILES = (0.10, 0.90)
DEFAULT_KNOT_SCHEME = "equal"
MIN_KNOTS = 3

# Harrell (2015), Regression Modeling Strategies, Table 2.3.
# Fixed quantile fractions by knot count.
HARRELL_QUANTILES = {
    3: (0.10, 0.50, 0.90),
    4: (0.05, 0.35, 0.65, 0.95),
    5: (0.05, 0.275, 0.50, 0.725, 0.95),
    6: (0.05, 0.23, 0.41, 0.59, 0.77, 0.95),
    7: (0.025, 0.1833, 0.3417, 0.50, 0.6583, 0.8167, 0.975),
}

# Below this many observations the Harrell scheme moves the outer knots
# to the 5th smallest / 5th largest value.
HARRELL_SMALL_SAMPLE = 100
HARRELL_OUTER_RANK = 5

# =====================================================================
# Basis Evaluation
# =====================================================================
# 0: raw truncated cubics
# 1: divide by (t_k - t_{k-1})^3
# 2: divide by (t_k - t_1)^2   (scale-comparable coefficients)
DEFAULT_NORM = 2
VALID_NORMS = (0, 1, 2)

# =====================================================================
# Transform / Diagnostics
# =====================================================================
STD_FLOOR = 1e-10            # columns with smaller SD are left unscaled
ORTHO_TOL = 1e-6             # max |<[1, x], Z>| / N to call Z orthogonal
EXTRAPOLATION_WARN_PCT = 15  # % of observations outside [t_1, t_k]
