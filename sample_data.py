from __future__ import annotations

import numpy as np

from data_structures import Dataset, Sample


def make_two_clusters(
    n_samples: int = 100,
    noise_fraction: float = 0.1,
    rng: np.random.Generator | None = None,
) -> Dataset:
    """Two square clusters: class A around (25, 25), class B around (75, 75).

    Afterwards floor(n_samples * noise_fraction) random draws (with repeats)
    move a point to a uniform position in [0, 100)^2, keeping its label.
    """
    if n_samples <= 0:
        raise ValueError("n_samples must be positive")
    if not (0.0 <= noise_fraction <= 1.0):
        raise ValueError("noise_fraction must be in [0, 1]")
    rng = rng if rng is not None else np.random.default_rng(0)

    n_a = n_samples // 2
    X = np.empty((n_samples, 2), dtype=np.float64)
    X[:n_a] = 25.0 + rng.uniform(-7.5, 7.5, size=(n_a, 2))
    X[n_a:] = 75.0 + rng.uniform(-7.5, 7.5, size=(n_samples - n_a, 2))
    labels = ["A"] * n_a + ["B"] * (n_samples - n_a)

    for _ in range(int(n_samples * noise_fraction)):
        idx = int(rng.integers(0, n_samples))
        X[idx] = rng.uniform(0.0, 100.0, size=2)

    return Dataset(X, labels, feature_names=["x1", "x2"])


def make_quadrant_data(
    n_samples: int = 100,
    n_features: int = 4,
    rng: np.random.Generator | None = None,
) -> Dataset:
    """Uniform features in [0, 1); class A in the high/high or low/low corner
    of the first two features, B elsewhere."""
    if n_samples <= 0:
        raise ValueError("n_samples must be positive")
    if n_features < 2:
        raise ValueError("n_features must be >= 2")
    rng = rng if rng is not None else np.random.default_rng(0)

    X = rng.random((n_samples, n_features))
    corner = ((X[:, 0] > 0.7) & (X[:, 1] > 0.7)) | ((X[:, 0] < 0.3) & (X[:, 1] < 0.3))
    labels = np.where(corner, "A", "B").tolist()
    return Dataset(X, labels, feature_names=[f"feature{j}" for j in range(n_features)])


def make_test_sample(dataset: Dataset, value: float = 50.0) -> Sample:
    """Unlabeled point with every feature set to `value`."""
    return Sample(
        sample_id=len(dataset),
        features={name: float(value) for name in dataset.feature_names},
        label=None,
    )
