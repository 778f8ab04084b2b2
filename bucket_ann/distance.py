"""Distance metric for bucket-ann.

The index ranks vectors with a component-wise "Euclidean" term: each
dimension contributes ``sqrt((a_i - b_i) ** 2)``, and the terms are summed.
Numerically this is the sum of absolute differences (L1), not the L2 norm
of the difference vector.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .errors import DimensionMismatch


def check_dimensions(a: Sequence[float], b: Sequence[float]) -> None:
    """Raise ``DimensionMismatch`` unless ``a`` and ``b`` have equal length."""
    if len(a) != len(b):
        raise DimensionMismatch(expected=len(a), actual=len(b))


def euclidean_term(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Per-dimension term ``sqrt((a_i - b_i) ** 2)``."""
    return np.sqrt(np.square(a - b))


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Sum of per-dimension Euclidean terms between ``a`` and ``b``.

    Parameters
    ----------
    a, b : equal-length sequences of real numbers.

    Returns
    -------
    float — non-negative distance; 0.0 for identical vectors.
    """
    check_dimensions(a, b)
    av = np.asarray(a, dtype=np.float64)
    bv = np.asarray(b, dtype=np.float64)
    return float(np.sum(euclidean_term(av, bv)))
