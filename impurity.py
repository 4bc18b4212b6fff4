from __future__ import annotations

import numpy as np


def class_counts(codes: np.ndarray, n_classes: int | None = None) -> np.ndarray:
    """Count integer class codes; index c holds the count of class c."""
    codes = np.asarray(codes, dtype=np.int64)
    minlength = 0 if n_classes is None else int(n_classes)
    if codes.size == 0:
        return np.zeros(minlength, dtype=np.int64)
    return np.bincount(codes, minlength=minlength)


def gini_from_counts(counts: np.ndarray) -> float:
    counts = np.asarray(counts, dtype=np.float64)
    total = float(counts.sum())
    if total <= 0.0:
        return 0.0
    p = counts / total
    return float(1.0 - np.sum(p * p))


def gini_impurity(codes: np.ndarray, n_classes: int | None = None) -> float:
    """Gini impurity 1 - sum(p_c^2) of a set of class codes; 0 for an empty set."""
    return gini_from_counts(class_counts(codes, n_classes))


def majority_class(counts: np.ndarray) -> int:
    """Index of the largest count; ties go to the lowest class index."""
    counts = np.asarray(counts)
    if counts.size == 0:
        raise ValueError("counts must not be empty")
    return int(np.argmax(counts))
