from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from data_structures.membership import MembershipTable
from data_structures.nodes import TreeNode


@dataclass(frozen=True)
class FeatureImportance:
    feature: str
    importance: float


@dataclass
class TreeBuildMetrics:
    nodes_visited: int = 0
    nodes_split: int = 0
    leaves: int = 0
    max_depth_reached: int = 0


@dataclass(frozen=True, eq=False)
class Tree:
    tree_id: int
    root: TreeNode
    sampled_indices: np.ndarray
    features: tuple[str, ...]
    oob_indices: np.ndarray
    importance: dict[str, float] = field(default_factory=dict)
    metrics: TreeBuildMetrics = field(default_factory=TreeBuildMetrics)
    oob_error: float | None = None
    # Width of the training matrix; vectors passed to this tree must match it.
    n_features: int | None = None


@dataclass(eq=False)
class Forest:
    trees: list[Tree]
    feature_names: tuple[str, ...]
    classes: tuple[str, ...]
    membership: MembershipTable
    feature_importance: list[FeatureImportance]
    raw_importance: dict[str, float]
    permutation_importance: list[FeatureImportance] | None = None
    metrics: dict = field(default_factory=dict)

    @property
    def num_trees(self) -> int:
        return len(self.trees)

    def importance_of(self, feature: str) -> float:
        for item in self.feature_importance:
            if item.feature == feature:
                return item.importance
        raise ValueError(f"Unknown feature: {feature!r}")

    def importance_shares(self) -> list[FeatureImportance]:
        """MDI importances rescaled to sum to one, for display."""
        total = sum(item.importance for item in self.feature_importance)
        if total <= 0.0:
            return [FeatureImportance(item.feature, 0.0) for item in self.feature_importance]
        return [
            FeatureImportance(item.feature, item.importance / total)
            for item in self.feature_importance
        ]
