from __future__ import annotations

import numpy as np


class MembershipTable:
    """Per-tree bootstrap membership: selected[tree, sample], OOB is the complement.

    Each tree writes only its own row.
    """

    def __init__(self, num_trees: int, n_samples: int) -> None:
        if num_trees <= 0:
            raise ValueError("num_trees must be positive")
        if n_samples <= 0:
            raise ValueError("n_samples must be positive")
        self.selected = np.zeros((num_trees, n_samples), dtype=bool)

    @property
    def num_trees(self) -> int:
        return int(self.selected.shape[0])

    @property
    def n_samples(self) -> int:
        return int(self.selected.shape[1])

    def record(self, tree_index: int, sampled_indices: np.ndarray) -> None:
        row = np.zeros(self.n_samples, dtype=bool)
        row[np.asarray(sampled_indices, dtype=np.int64)] = True
        self.selected[tree_index] = row

    def selected_mask(self, tree_index: int) -> np.ndarray:
        return self.selected[tree_index].copy()

    def oob_mask(self, tree_index: int) -> np.ndarray:
        return ~self.selected[tree_index]

    def oob_indices(self, tree_index: int) -> np.ndarray:
        return np.flatnonzero(~self.selected[tree_index])

    def is_oob(self, tree_index: int, sample_index: int) -> bool:
        return not bool(self.selected[tree_index, sample_index])

    def oob_tree_counts(self) -> np.ndarray:
        """Number of trees for which each sample is out-of-bag."""
        return np.sum(~self.selected, axis=0)
