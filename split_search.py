from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from impurity import class_counts, gini_from_counts


@dataclass
class SplitSearchParams:
    # Candidate thresholds per feature, evenly spaced over the sorted values.
    # None evaluates the midpoint of every adjacent pair.
    max_thresholds: int | None = 10

    def __post_init__(self) -> None:
        if self.max_thresholds is not None and self.max_thresholds <= 0:
            raise ValueError("max_thresholds must be positive or None")


@dataclass(frozen=True)
class SplitCandidate:
    feature: int
    threshold: float


@dataclass
class SplitResult:
    feature: int | None
    threshold: float
    impurity_decrease: float
    parent_impurity: float
    left_rows: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.int64))
    right_rows: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.int64))
    candidates_evaluated: int = 0

    @property
    def is_valid(self) -> bool:
        return self.feature is not None and self.impurity_decrease > 0.0


def candidate_positions(n: int, max_thresholds: int | None) -> np.ndarray:
    """Positions i in the sorted order whose (i, i+1) midpoint is tried as a threshold."""
    if n < 2:
        return np.array([], dtype=np.int64)
    step = 1 if max_thresholds is None else max(1, n // max_thresholds)
    return np.arange(0, n - 1, step, dtype=np.int64)


def find_best_split(
    X: np.ndarray,
    y: np.ndarray,
    rows: np.ndarray,
    candidate_features: list[int],
    n_classes: int,
    params: SplitSearchParams | None = None,
) -> SplitResult:
    """Best (feature, threshold) by Gini decrease over the given rows.

    Rows may repeat (bootstrap samples). Left is value <= threshold. Ties keep
    the first feature in `candidate_features`, then the first threshold.
    """
    params = params or SplitSearchParams()
    rows = np.asarray(rows, dtype=np.int64)
    n = int(rows.size)

    node_codes = y[rows]
    parent_counts = class_counts(node_codes, n_classes)
    parent_impurity = gini_from_counts(parent_counts)

    best: SplitCandidate | None = None
    best_decrease = -np.inf
    evaluated = 0

    positions = candidate_positions(n, params.max_thresholds)
    for feature in candidate_features:
        values = X[rows, feature]
        order = np.argsort(values, kind="stable")
        sorted_values = values[order]
        sorted_codes = node_codes[order]

        for i in positions:
            threshold = float((sorted_values[i] + sorted_values[i + 1]) / 2.0)
            n_left = int(np.searchsorted(sorted_values, threshold, side="right"))
            if n_left == 0 or n_left == n:
                continue

            left_counts = class_counts(sorted_codes[:n_left], n_classes)
            right_counts = parent_counts - left_counts
            weighted = (
                n_left / n * gini_from_counts(left_counts)
                + (n - n_left) / n * gini_from_counts(right_counts)
            )
            decrease = parent_impurity - weighted
            evaluated += 1

            if decrease > best_decrease:
                best_decrease = decrease
                best = SplitCandidate(feature=int(feature), threshold=threshold)

    if best is None:
        return SplitResult(
            feature=None,
            threshold=0.0,
            impurity_decrease=0.0,
            parent_impurity=parent_impurity,
            candidates_evaluated=evaluated,
        )

    left_mask = X[rows, best.feature] <= best.threshold
    return SplitResult(
        feature=best.feature,
        threshold=best.threshold,
        impurity_decrease=float(best_decrease),
        parent_impurity=parent_impurity,
        left_rows=rows[left_mask],
        right_rows=rows[~left_mask],
        candidates_evaluated=evaluated,
    )
