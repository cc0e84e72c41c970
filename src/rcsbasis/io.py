# io.py
# Save / load a knot set (and optional basis transform) as JSON
# -------------------------------------------------------------------
# Forecasting reuses the knots chosen at fit time; recomputing quantiles
# on new data would silently change the basis. Nothing in the package
# calls these implicitly.
# -------------------------------------------------------------------

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np

from rcsbasis.config import DEFAULT_NORM
from rcsbasis.rcs_basis import validate_knots
from rcsbasis.transform import BasisTransform

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _to_builtin(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    return value


def save_spline_params(path: PathLike,
                       knots,
                       *,
                       norm: int = DEFAULT_NORM,
                       transform: Optional[BasisTransform] = None,
                       **extra: Any) -> Path:
    """
    Write knots, normalisation, optional transform and any extra scalars
    (e.g. centring constants) to `path` as indented UTF-8 JSON.
    """
    k = validate_knots(knots)
    path = Path(path)
    params: Dict[str, Any] = {key: _to_builtin(val) for key, val in extra.items()}
    params.update({"knots": k.tolist(), "norm": int(norm)})
    if transform is not None:
        params["transform"] = transform.to_dict()

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(params, f, ensure_ascii=False, indent=2)
    logger.info("Saved RCS parameters (%d knots) to %s", k.size, path)
    return path


def load_spline_params(path: PathLike) -> Dict[str, Any]:
    """
    Read a file written by `save_spline_params`.

    ``knots`` comes back as a validated ndarray and ``transform`` (when
    present) as a `BasisTransform`; other keys are returned as stored.
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        params = json.load(f)
    if "knots" not in params:
        raise KeyError(f"{path} has no 'knots' entry")
    params["knots"] = validate_knots(params["knots"])
    params["norm"] = int(params.get("norm", DEFAULT_NORM))
    if "transform" in params:
        params["transform"] = BasisTransform.from_dict(params["transform"])
    return params
