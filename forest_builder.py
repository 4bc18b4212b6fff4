from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass, replace
from typing import Sequence

import numpy as np
from joblib import Parallel, delayed

from bootstrapping import Bootstrapper, BootstrapSample
from data_structures import Dataset, FeatureImportance, Forest, MembershipTable, Sample, Tree
from feature_sampling import FeatureSelector
from oob_evaluation import per_tree_oob_error
from split_search import SplitSearchParams
from tree_builder import TreeBuilder, TreeBuilderParams

logger = logging.getLogger(__name__)


@dataclass
class ForestParams:
    num_trees: int = 5
    max_depth: int = 3
    feature_randomness: bool = True
    random_state: int = 0

    # None or 1 grows trees on the calling thread; see joblib.Parallel.
    n_jobs: int | None = None

    min_samples_split: int = 2
    purity_epsilon: float = 0.01
    max_thresholds: int | None = 10
    small_space_limit: int = 4

    def __post_init__(self) -> None:
        integer_fields = (
            "num_trees",
            "max_depth",
            "random_state",
            "min_samples_split",
            "small_space_limit",
        )
        for name in integer_fields:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ValueError(f"{name} must be an integer")
        if self.num_trees <= 0:
            raise ValueError("num_trees must be positive")
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if not isinstance(self.feature_randomness, (bool, np.bool_)):
            raise ValueError("feature_randomness must be a bool")
        if self.random_state < 0:
            raise ValueError("random_state must be >= 0")
        if self.small_space_limit < 0:
            raise ValueError("small_space_limit must be >= 0")
        if not isinstance(self.purity_epsilon, numbers.Real):
            raise ValueError("purity_epsilon must be a number")
        if self.max_thresholds is not None and not isinstance(self.max_thresholds, numbers.Integral):
            raise ValueError("max_thresholds must be an integer or None")
        # Remaining range checks live in TreeBuilderParams and SplitSearchParams.
        self.tree_builder_params()

    def tree_builder_params(self) -> TreeBuilderParams:
        return TreeBuilderParams(
            max_depth=self.max_depth,
            min_samples_split=self.min_samples_split,
            purity_epsilon=self.purity_epsilon,
            split_search=SplitSearchParams(max_thresholds=self.max_thresholds),
        )


@dataclass
class _GrownTree:
    tree: Tree
    bootstrap: BootstrapSample


def _grow_tree(dataset: Dataset, tree_index: int, params: ForestParams) -> _GrownTree:
    # Per-tree generator, seeded random_state + tree_index.
    rng = np.random.default_rng(params.random_state + tree_index)

    bootstrap = Bootstrapper().sample(len(dataset), tree_index, rng)
    selector = FeatureSelector(params.feature_randomness, params.small_space_limit)
    features = selector.select(list(range(dataset.n_features)), rng)

    builder = TreeBuilder(dataset, params.tree_builder_params())
    root, importance = builder.build_tree(bootstrap.sampled_indices, features, tree_id=tree_index)

    tree = Tree(
        tree_id=tree_index,
        root=root,
        sampled_indices=bootstrap.sampled_indices,
        features=tuple(dataset.feature_names[j] for j in features),
        oob_indices=bootstrap.oob_indices,
        importance={dataset.feature_names[j]: value for j, value in importance.items()},
        metrics=builder.metrics,
        n_features=dataset.n_features,
    )
    logger.debug(
        "tree %d: features=%s nodes_split=%d leaves=%d oob=%d",
        tree_index,
        list(tree.features),
        builder.metrics.nodes_split,
        builder.metrics.leaves,
        bootstrap.oob_indices.size,
    )
    return _GrownTree(tree=tree, bootstrap=bootstrap)


class ForestBuilder:
    """Bagged Gini trees with per-tree feature subsets, OOB errors and MDI importance."""

    def __init__(self, params: ForestParams | None = None) -> None:
        self.params = params or ForestParams()
        self.metrics: dict = {}

    def build_forest(self, dataset: Dataset) -> Forest:
        if len(dataset) == 0:
            raise ValueError("dataset must contain at least one sample")
        if dataset.n_features == 0:
            raise ValueError("dataset must contain at least one feature")

        params = self.params
        grown = Parallel(n_jobs=params.n_jobs)(
            delayed(_grow_tree)(dataset, tree_index, params)
            for tree_index in range(params.num_trees)
        )
        grown = sorted(grown, key=lambda g: g.tree.tree_id)

        membership = MembershipTable(params.num_trees, len(dataset))
        raw_importance = {name: 0.0 for name in dataset.feature_names}
        trees: list[Tree] = []
        self.metrics = {
            "nodes_visited": 0,
            "nodes_split": 0,
            "leaves": 0,
            "tree_metrics": [],
        }

        for g in grown:
            membership.record(g.tree.tree_id, g.bootstrap.sampled_indices)
            for name, value in g.tree.importance.items():
                raw_importance[name] += value

            tree = replace(g.tree, oob_error=per_tree_oob_error(g.tree, dataset))
            trees.append(tree)

            self.metrics["nodes_visited"] += tree.metrics.nodes_visited
            self.metrics["nodes_split"] += tree.metrics.nodes_split
            self.metrics["leaves"] += tree.metrics.leaves
            self.metrics["tree_metrics"].append(
                {
                    "tree_idx": tree.tree_id,
                    "nodes_visited": tree.metrics.nodes_visited,
                    "nodes_split": tree.metrics.nodes_split,
                    "leaves": tree.metrics.leaves,
                    "max_depth_reached": tree.metrics.max_depth_reached,
                    "oob_size": int(tree.oob_indices.size),
                    "oob_error": tree.oob_error,
                }
            )

        scale = params.num_trees * len(dataset)
        importance = [
            FeatureImportance(name, raw_importance[name] / scale)
            for name in dataset.feature_names
        ]
        # Stable sort: equal importances keep dataset feature order.
        importance.sort(key=lambda item: item.importance, reverse=True)

        logger.info(
            "built forest: trees=%d max_depth=%d feature_randomness=%s samples=%d",
            params.num_trees,
            params.max_depth,
            params.feature_randomness,
            len(dataset),
        )
        return Forest(
            trees=trees,
            feature_names=dataset.feature_names,
            classes=dataset.classes,
            membership=membership,
            feature_importance=importance,
            raw_importance=raw_importance,
            metrics=self.metrics,
        )


def build_forest(
    samples: Dataset | Sequence[Sample],
    num_trees: int = 5,
    max_depth: int = 3,
    feature_randomness: bool = True,
    random_state: int = 0,
    n_jobs: int | None = None,
) -> Forest:
    dataset = samples if isinstance(samples, Dataset) else Dataset.from_samples(samples)
    params = ForestParams(
        num_trees=num_trees,
        max_depth=max_depth,
        feature_randomness=feature_randomness,
        random_state=random_state,
        n_jobs=n_jobs,
    )
    return ForestBuilder(params).build_forest(dataset)
