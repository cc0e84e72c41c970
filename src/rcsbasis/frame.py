# frame.py
# pandas adapters: RCS columns on a DataFrame, per-level loading tables
# -------------------------------------------------------------------
# Long-format panels repeat a few time points across many subjects, so
# columns are built through the per-level path (`expand_unique`).
# -------------------------------------------------------------------

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd

from rcsbasis.config import DEFAULT_NORM
from rcsbasis.rcs_basis import build_basis_unique, expand_unique, validate_knots


def add_rcs_columns(df: pd.DataFrame,
                    column: str,
                    knots,
                    *,
                    prefix: Optional[str] = None,
                    norm: int = DEFAULT_NORM) -> pd.DataFrame:
    """
    Return a copy of `df` with the K-2 nonlinear RCS columns of `column` appended.

    Columns are named ``{prefix}1 .. {prefix}{K-2}`` (default prefix
    ``"{column}_rcs"``). Rows where `column` is missing get NaN.
    """
    if column not in df.columns:
        raise KeyError(f"Column {column!r} not in DataFrame")
    k = validate_knots(knots)
    prefix = f"{column}_rcs" if prefix is None else prefix

    x = pd.to_numeric(df[column], errors="coerce").to_numpy(dtype=float, na_value=np.nan)
    B = expand_unique(x, k, norm=norm)

    out = df.copy()
    for j in range(1, B.shape[1]):
        out[f"{prefix}{j}"] = B[:, j]
    return out


def loadings_table(levels, knots, *, norm: int = DEFAULT_NORM) -> pd.DataFrame:
    """
    Basis value of each distinct level as a table.

    In a latent growth model these are the fixed loadings of the repeated
    measures on the linear and spline growth factors.

    Returns
    -------
    DataFrame indexed by level (sorted), columns ``linear, rcs1, ..., rcs{K-2}``.
    """
    rows = build_basis_unique(levels, knots, norm=norm)
    n_cols = len(next(iter(rows.values()))) if rows else validate_knots(knots).size - 1
    columns = ["linear"] + [f"rcs{j}" for j in range(1, n_cols)]
    table = pd.DataFrame.from_dict(rows, orient="index", columns=columns)
    table.index.name = "level"
    return table.sort_index()
