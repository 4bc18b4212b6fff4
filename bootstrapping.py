from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from data_structures import MembershipTable


@dataclass(frozen=True, eq=False)
class BootstrapSample:
    tree_index: int
    sampled_indices: np.ndarray
    oob_indices: np.ndarray


class Bootstrapper:
    """Sampling with replacement, one draw per dataset row."""

    def __init__(self, membership: MembershipTable | None = None) -> None:
        self.membership = membership

    def sample(
        self,
        dataset_size: int,
        tree_index: int,
        rng: np.random.Generator,
    ) -> BootstrapSample:
        if dataset_size <= 0:
            raise ValueError("dataset_size must be positive")

        sampled = rng.integers(0, dataset_size, size=dataset_size, dtype=np.int64)
        drawn = np.zeros(dataset_size, dtype=bool)
        drawn[sampled] = True
        oob = np.flatnonzero(~drawn)

        if self.membership is not None:
            self.membership.record(tree_index, sampled)

        return BootstrapSample(tree_index=tree_index, sampled_indices=sampled, oob_indices=oob)
