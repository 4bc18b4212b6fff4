from __future__ import annotations

import math
from typing import Sequence, TypeVar

import numpy as np

T = TypeVar("T")


class FeatureSelector:
    """Per-tree random feature subsets.

    For feature spaces up to `small_space_limit` the subset size is uniform in
    [1, n]; above it the size is ceil(sqrt(n)).
    """

    def __init__(self, randomness_enabled: bool = True, small_space_limit: int = 4) -> None:
        if small_space_limit < 0:
            raise ValueError("small_space_limit must be >= 0")
        self.randomness_enabled = randomness_enabled
        self.small_space_limit = small_space_limit

    def subset_size(self, n_features: int, rng: np.random.Generator) -> int:
        if n_features <= self.small_space_limit:
            return int(rng.integers(1, n_features + 1))
        return int(math.ceil(math.sqrt(n_features)))

    def select(self, features: Sequence[T], rng: np.random.Generator) -> list[T]:
        features = list(features)
        if not self.randomness_enabled or not features:
            return features

        size = self.subset_size(len(features), rng)
        chosen = rng.permutation(len(features))[:size]
        # Returned in dataset order.
        return [features[i] for i in np.sort(chosen)]
