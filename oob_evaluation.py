from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from data_structures import Dataset, Forest, Tree
from predictor import predict_tree_codes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OOBCurvePoint:
    forest_size: int
    # None when no sample is out-of-bag for any of the first forest_size trees.
    error: float | None
    n_evaluated: int


def per_tree_oob_error(tree: Tree, dataset: Dataset) -> float | None:
    """Misclassification rate of one tree on its own out-of-bag rows."""
    oob = np.asarray(tree.oob_indices, dtype=np.int64)
    if oob.size == 0:
        return None
    predicted = predict_tree_codes(tree, dataset.X[oob])
    return float(np.mean(predicted != dataset.y[oob]))


def _oob_masks(forest: Forest, n_samples: int) -> np.ndarray:
    masks = np.zeros((forest.num_trees, n_samples), dtype=bool)
    for i, tree in enumerate(forest.trees):
        masks[i, np.asarray(tree.oob_indices, dtype=np.int64)] = True
    return masks


def cumulative_oob_curve(forest: Forest, dataset: Dataset) -> list[OOBCurvePoint]:
    """OOB error of the first k trees for k = 1..num_trees.

    Each sample is voted on only by the prefix trees that did not see it.
    Samples with no such tree are left out of that prefix's denominator.
    """
    n = len(dataset)
    n_classes = len(forest.classes)
    masks = _oob_masks(forest, n)
    counts = np.zeros((n, n_classes), dtype=np.int64)
    all_rows = np.arange(n, dtype=np.int64)

    curve: list[OOBCurvePoint] = []
    for k, tree in enumerate(forest.trees, start=1):
        oob_rows = all_rows[masks[k - 1]]
        if oob_rows.size:
            predicted = predict_tree_codes(tree, dataset.X[oob_rows])
            counts[oob_rows, predicted] += 1

        evaluated = counts.sum(axis=1) > 0
        n_evaluated = int(np.count_nonzero(evaluated))
        if n_evaluated == 0:
            curve.append(OOBCurvePoint(forest_size=k, error=None, n_evaluated=0))
            continue

        winners = np.argmax(counts[evaluated], axis=1)
        error = float(np.mean(winners != dataset.y[evaluated]))
        curve.append(OOBCurvePoint(forest_size=k, error=error, n_evaluated=n_evaluated))

    if curve:
        logger.debug(
            "OOB curve over %d trees ends at error=%s (n=%d)",
            len(curve),
            curve[-1].error,
            curve[-1].n_evaluated,
        )
    return curve


def oob_error(forest: Forest, dataset: Dataset) -> float | None:
    curve = cumulative_oob_curve(forest, dataset)
    return curve[-1].error if curve else None
