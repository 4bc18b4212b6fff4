import argparse
import logging
import sys
import time
from pathlib import Path

import numpy as np

# Allow running as: python experiments/forest_walkthrough.py
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from data_structures import InternalNode, iter_nodes
from forest_builder import ForestBuilder, ForestParams
from oob_evaluation import cumulative_oob_curve
from permutation_importance import permutation_importance
from predictor import decision_path, predict_forest
from sample_data import make_quadrant_data, make_test_sample, make_two_clusters


def load_dataset(name: str, num_samples: int, random_state: int):
    rng = np.random.default_rng(random_state)
    key = name.lower()
    if key == "clusters":
        return make_two_clusters(num_samples, rng=rng), 50.0
    if key == "quadrants":
        return make_quadrant_data(num_samples, rng=rng), 0.5
    raise ValueError(f"Unknown dataset '{name}'. Choose from: clusters, quadrants")


def describe_tree(tree) -> list[str]:
    lines = [
        f"Tree {tree.tree_id}: features={list(tree.features)}"
        f" bootstrap_unique={np.unique(tree.sampled_indices).size}"
        f" oob={tree.oob_indices.size}"
        f" oob_error={'n/a' if tree.oob_error is None else f'{tree.oob_error:.3f}'}"
    ]
    for node in iter_nodes(tree.root):
        indent = "  " * (node.depth + 1)
        if isinstance(node, InternalNode):
            lines.append(
                f"{indent}{node.node_id} [{node.feature} <= {node.threshold:.2f}]"
                f" n={node.n_samples} gini={node.impurity:.3f}"
                f" decrease={node.impurity_decrease:.3f}"
            )
        else:
            lines.append(
                f"{indent}{node.node_id} -> {node.majority_class}"
                f" n={node.n_samples} gini={node.impurity:.3f}"
            )
    return lines


def main():
    parser = argparse.ArgumentParser(description="Train a small random forest and walk through its internals")
    parser.add_argument("--dataset", type=str, default="clusters", help="One of: clusters, quadrants")
    parser.add_argument("--num-samples", type=int, default=100)
    parser.add_argument("--num-trees", type=int, default=5)
    parser.add_argument("--max-depth", type=int, default=3)
    parser.add_argument(
        "--no-feature-randomness",
        action="store_true",
        help="Let every tree consider all features.",
    )
    parser.add_argument(
        "--max-thresholds",
        type=int,
        default=10,
        help="Candidate thresholds per feature; use <=0 to try every adjacent pair",
    )
    parser.add_argument("--n-jobs", type=int, default=None)
    parser.add_argument("--random-state", type=int, default=42)
    parser.add_argument("--verbose", action="store_true")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if args.num_samples <= 0:
        raise ValueError("--num-samples must be positive")

    dataset, test_value = load_dataset(args.dataset, args.num_samples, args.random_state)
    print(f"Dataset={args.dataset} n={len(dataset)} features={list(dataset.feature_names)} classes={list(dataset.classes)}")

    params = ForestParams(
        num_trees=args.num_trees,
        max_depth=args.max_depth,
        feature_randomness=not args.no_feature_randomness,
        random_state=args.random_state,
        n_jobs=args.n_jobs,
        max_thresholds=(None if args.max_thresholds <= 0 else args.max_thresholds),
    )
    builder = ForestBuilder(params)
    t0 = time.perf_counter()
    forest = builder.build_forest(dataset)
    fit_time = time.perf_counter() - t0
    print(f"Built {forest.num_trees} trees in {fit_time:.3f}s"
          f" nodes_split={builder.metrics['nodes_split']} leaves={builder.metrics['leaves']}")

    for tree in forest.trees:
        print("\n".join(describe_tree(tree)))

    print("\nOOB error by forest size")
    for point in cumulative_oob_curve(forest, dataset):
        error = "n/a" if point.error is None else f"{point.error:.3f}"
        print(f"  trees={point.forest_size} error={error} evaluated={point.n_evaluated}")

    print("\nMean decrease in impurity")
    for item in forest.feature_importance:
        print(f"  {item.feature}: {item.importance:.4f}")

    print("\nPermutation importance")
    for item in permutation_importance(forest, dataset, random_state=args.random_state):
        print(f"  {item.feature}: {item.importance:+.4f}")

    test_sample = make_test_sample(dataset, value=test_value)
    result = predict_forest(test_sample, forest)
    print(f"\nTest point {dict(test_sample.features)} -> {result.prediction} votes={result.vote_counts}")
    for vote, tree in zip(result.votes, forest.trees):
        path = " -> ".join(node.node_id for node in decision_path(test_sample, tree))
        print(f"  tree {vote.tree_id}: {vote.prediction} via {path}")


if __name__ == "__main__":
    main()
