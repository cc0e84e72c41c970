from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest


def _ensure_local_src_first() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    src = repo_root / "src"
    if src.is_dir():
        s = str(src)
        if s not in sys.path:
            sys.path.insert(0, s)


_ensure_local_src_first()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(20240611)


@pytest.fixture
def knots5() -> np.ndarray:
    """Unevenly spaced 5-knot set used across tests."""
    return np.array([1.0, 2.5, 4.0, 6.5, 9.0], dtype=float)
