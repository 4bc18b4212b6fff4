from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from data_structures import Dataset, InternalNode, Leaf, TreeBuildMetrics, TreeNode
from impurity import class_counts, gini_from_counts, majority_class
from split_search import SplitResult, SplitSearchParams, find_best_split


@dataclass
class TreeBuilderParams:
    max_depth: int = 3
    min_samples_split: int = 2
    # Nodes below this Gini impurity are treated as pure.
    purity_epsilon: float = 0.01

    split_search: SplitSearchParams = field(default_factory=SplitSearchParams)

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.min_samples_split < 2:
            raise ValueError("min_samples_split must be >= 2")
        if self.purity_epsilon < 0.0:
            raise ValueError("purity_epsilon must be >= 0")


class TreeBuilder:
    """Recursive Gini tree induction over rows of a dataset.

    Rows index into the dataset and may repeat, which is how a bootstrap
    sample is represented. The builder never mutates the dataset.
    """

    def __init__(self, dataset: Dataset, params: TreeBuilderParams | None = None) -> None:
        self.dataset = dataset
        self.params = params or TreeBuilderParams()
        self.X = dataset.X
        self.y = dataset.y
        self.n_classes = dataset.n_classes
        self.metrics = TreeBuildMetrics()

    def _make_leaf(
        self,
        rows: np.ndarray,
        depth: int,
        impurity: float,
        counts: np.ndarray,
        node_id: str,
    ) -> Leaf:
        class_index = majority_class(counts)
        self.metrics.leaves += 1
        self.metrics.max_depth_reached = max(self.metrics.max_depth_reached, depth)
        return Leaf(
            node_id=node_id,
            depth=depth,
            rows=rows,
            n_samples=int(rows.size),
            impurity=impurity,
            class_counts=tuple(int(c) for c in counts),
            class_index=class_index,
            majority_class=self.dataset.classes[class_index],
        )

    def _is_splittable(self, rows: np.ndarray, depth: int, impurity: float) -> bool:
        if depth >= self.params.max_depth:
            return False
        if impurity < self.params.purity_epsilon:
            return False
        if rows.size < self.params.min_samples_split:
            return False
        return True

    def _find_best_split(self, rows: np.ndarray, features: list[int]) -> SplitResult:
        return find_best_split(
            self.X,
            self.y,
            rows,
            features,
            n_classes=self.n_classes,
            params=self.params.split_search,
        )

    def build(
        self,
        rows: np.ndarray,
        features: list[int],
        depth: int = 0,
        importance: dict[int, float] | None = None,
        node_id: str = "",
    ) -> TreeNode:
        """Grow the subtree for `rows`, adding each split's
        `impurity_decrease * n_rows` into `importance` keyed by feature index."""
        rows = np.asarray(rows, dtype=np.int64)
        if importance is None:
            importance = {}
        self.metrics.nodes_visited += 1

        counts = class_counts(self.y[rows], self.n_classes)
        impurity = gini_from_counts(counts)

        if not self._is_splittable(rows, depth, impurity):
            return self._make_leaf(rows, depth, impurity, counts, node_id)

        split = self._find_best_split(rows, features)
        if not split.is_valid:
            return self._make_leaf(rows, depth, impurity, counts, node_id)

        assert split.feature is not None
        contribution = split.impurity_decrease * rows.size
        importance[split.feature] = importance.get(split.feature, 0.0) + contribution
        self.metrics.nodes_split += 1

        left = self.build(split.left_rows, features, depth + 1, importance, node_id + "L")
        right = self.build(split.right_rows, features, depth + 1, importance, node_id + "R")

        return InternalNode(
            node_id=node_id,
            depth=depth,
            rows=rows,
            n_samples=int(rows.size),
            impurity=impurity,
            feature=self.dataset.feature_names[split.feature],
            feature_index=split.feature,
            threshold=split.threshold,
            impurity_decrease=split.impurity_decrease,
            importance=contribution,
            left=left,
            right=right,
        )

    def build_tree(
        self,
        rows: np.ndarray,
        features: list[int],
        tree_id: int = 0,
    ) -> tuple[TreeNode, dict[int, float]]:
        importance: dict[int, float] = {}
        root = self.build(rows, features, 0, importance, node_id=f"tree{tree_id}_")
        return root, importance
