from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Mapping, Sequence
from typing import Union

import numpy as np

from data_structures import Forest, InternalNode, Leaf, Sample, Tree, TreeNode

# A Sample, a mapping by feature name, or a vector in dataset column order.
SampleLike = Union[Sample, Mapping[str, float], Sequence[float], np.ndarray]


@dataclass(frozen=True)
class TreeVote:
    tree_id: int
    prediction: str


@dataclass(frozen=True)
class ForestPrediction:
    prediction: str
    votes: tuple[TreeVote, ...]
    vote_counts: dict[str, int]


def _root_of(tree: Tree | TreeNode) -> TreeNode:
    return tree.root if isinstance(tree, Tree) else tree


def _as_vector(sample: SampleLike, n_features: int | None) -> np.ndarray:
    vector = np.asarray(sample, dtype=np.float64)
    if vector.ndim != 1:
        raise ValueError("sample vector must be 1D")
    if n_features is not None and vector.size != n_features:
        raise ValueError(
            f"sample has {vector.size} features, expected {n_features}"
        )
    return vector


def _feature_value(sample: SampleLike, node: InternalNode) -> float:
    features = sample.features if isinstance(sample, Sample) else sample
    if isinstance(features, Mapping):
        try:
            return float(features[node.feature])
        except KeyError:
            raise ValueError(f"Sample is missing feature: {node.feature!r}") from None
    if node.feature_index >= features.size:
        raise ValueError(
            f"sample has {features.size} features, split needs index {node.feature_index}"
        )
    return float(features[node.feature_index])


def decision_path(sample: SampleLike, tree: Tree | TreeNode) -> list[TreeNode]:
    """Nodes visited from the root to the leaf that answers for `sample`.

    Raw vectors are checked against the tree's training width when it is known.
    """
    if not isinstance(sample, (Sample, Mapping)):
        n_features = tree.n_features if isinstance(tree, Tree) else None
        sample = _as_vector(sample, n_features)
    node = _root_of(tree)
    path = [node]
    while isinstance(node, InternalNode):
        if _feature_value(sample, node) <= node.threshold:
            node = node.left
        else:
            node = node.right
        path.append(node)
    return path


def predict_one(sample: SampleLike, tree: Tree | TreeNode) -> str:
    leaf = decision_path(sample, tree)[-1]
    assert isinstance(leaf, Leaf)
    return leaf.majority_class


def _fill_leaf_codes(node: TreeNode, X: np.ndarray, rows: np.ndarray, out: np.ndarray) -> None:
    if isinstance(node, Leaf):
        out[rows] = node.class_index
        return
    go_left = X[rows, node.feature_index] <= node.threshold
    _fill_leaf_codes(node.left, X, rows[go_left], out)
    _fill_leaf_codes(node.right, X, rows[~go_left], out)


def predict_tree_codes(tree: Tree | TreeNode, X: np.ndarray) -> np.ndarray:
    """Class codes predicted by one tree for every row of X."""
    X = np.asarray(X, dtype=np.float64)
    out = np.full(X.shape[0], -1, dtype=np.int64)
    _fill_leaf_codes(_root_of(tree), X, np.arange(X.shape[0], dtype=np.int64), out)
    return out


def _check_width(forest: Forest, X: np.ndarray) -> np.ndarray:
    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2:
        raise ValueError("X must be 2D")
    if X.shape[1] != len(forest.feature_names):
        raise ValueError(
            f"X has {X.shape[1]} features, forest was trained on {len(forest.feature_names)}"
        )
    return X


def predict_codes(forest: Forest, X: np.ndarray) -> np.ndarray:
    """Per-tree class codes, shape (num_trees, n_rows)."""
    X = _check_width(forest, X)
    if not forest.trees:
        return np.empty((0, X.shape[0]), dtype=np.int64)
    return np.vstack([predict_tree_codes(tree, X) for tree in forest.trees])


def vote(codes: np.ndarray, n_classes: int) -> np.ndarray:
    """Plurality over axis 0 of a (num_trees, n_rows) code matrix.

    Ties go to the lowest class code, i.e. first appearance in training data.
    """
    codes = np.asarray(codes, dtype=np.int64)
    counts = np.zeros((codes.shape[1], n_classes), dtype=np.int64)
    for row in codes:
        counts[np.arange(codes.shape[1]), row] += 1
    return np.argmax(counts, axis=1)


def majority_vote(labels: Sequence[str], class_order: Sequence[str]) -> str:
    if not labels:
        raise ValueError("labels must not be empty")
    counts = {label: 0 for label in class_order}
    for label in labels:
        if label not in counts:
            counts[label] = 0
        counts[label] += 1

    best_label = None
    best_count = 0
    for label, count in counts.items():
        if count > best_count:
            best_label, best_count = label, count
    assert best_label is not None
    return best_label


def predict_forest(sample: SampleLike, forest: Forest) -> ForestPrediction:
    if not forest.trees:
        raise ValueError("forest has no trees")
    if not isinstance(sample, (Sample, Mapping)):
        sample = _as_vector(sample, len(forest.feature_names))

    votes = tuple(TreeVote(tree.tree_id, predict_one(sample, tree)) for tree in forest.trees)
    labels = [v.prediction for v in votes]
    vote_counts = {label: labels.count(label) for label in forest.classes if label in labels}
    return ForestPrediction(
        prediction=majority_vote(labels, forest.classes),
        votes=votes,
        vote_counts=vote_counts,
    )


def predict(forest: Forest, X: np.ndarray) -> np.ndarray:
    winners = vote(predict_codes(forest, X), len(forest.classes))
    return np.array([forest.classes[c] for c in winners], dtype=object)


def accuracy(forest: Forest, X: np.ndarray, y: np.ndarray) -> float:
    """Fraction of rows whose forest vote matches the class codes in y."""
    y = np.asarray(y, dtype=np.int64)
    if y.size == 0:
        return 0.0
    winners = vote(predict_codes(forest, X), len(forest.classes))
    return float(np.mean(winners == y))
