"""
Data structures for random forest training and inference.

Samples and datasets, the Leaf/InternalNode tree variant, per-tree bootstrap
membership, and the Tree/Forest containers produced by the forest builder.
"""

from data_structures.forest import FeatureImportance, Forest, Tree, TreeBuildMetrics
from data_structures.membership import MembershipTable
from data_structures.nodes import (
    InternalNode,
    Leaf,
    TreeNode,
    count_nodes,
    iter_leaves,
    iter_nodes,
    tree_depth,
)
from data_structures.sample import Dataset, Sample

__all__ = [
    "Dataset",
    "FeatureImportance",
    "Forest",
    "InternalNode",
    "Leaf",
    "MembershipTable",
    "Sample",
    "Tree",
    "TreeBuildMetrics",
    "TreeNode",
    "count_nodes",
    "iter_leaves",
    "iter_nodes",
    "tree_depth",
]
