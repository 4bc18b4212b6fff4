from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Union

import numpy as np


@dataclass(frozen=True, eq=False)
class Leaf:
    node_id: str
    depth: int
    rows: np.ndarray
    n_samples: int
    impurity: float
    class_counts: tuple[int, ...]
    class_index: int
    majority_class: str

    is_leaf = True


@dataclass(frozen=True, eq=False)
class InternalNode:
    node_id: str
    depth: int
    rows: np.ndarray
    n_samples: int
    impurity: float
    feature: str
    feature_index: int
    threshold: float
    impurity_decrease: float
    importance: float
    left: "TreeNode"
    right: "TreeNode"

    is_leaf = False


TreeNode = Union[Leaf, InternalNode]


def iter_nodes(node: TreeNode) -> Iterator[TreeNode]:
    """Pre-order walk: node, then its left subtree, then its right subtree."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        if isinstance(current, InternalNode):
            stack.append(current.right)
            stack.append(current.left)


def iter_leaves(node: TreeNode) -> Iterator[Leaf]:
    for current in iter_nodes(node):
        if isinstance(current, Leaf):
            yield current


def tree_depth(node: TreeNode) -> int:
    return max(leaf.depth for leaf in iter_leaves(node))


def count_nodes(node: TreeNode) -> int:
    return sum(1 for _ in iter_nodes(node))
