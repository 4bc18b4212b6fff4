from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence

import numpy as np


@dataclass(frozen=True)
class Sample:
    sample_id: int
    features: Mapping[str, float] = field(default_factory=dict)
    label: str | None = None

    def vector(self, feature_names: Sequence[str]) -> np.ndarray:
        missing = [name for name in feature_names if name not in self.features]
        if missing:
            raise ValueError(f"Sample {self.sample_id} is missing features: {missing}")
        return np.array([float(self.features[name]) for name in feature_names], dtype=np.float64)


class Dataset:
    """Read-only feature matrix with labels encoded in first-appearance order."""

    def __init__(
        self,
        X: np.ndarray,
        labels: Sequence[str],
        feature_names: Sequence[str] | None = None,
        sample_ids: Sequence[int] | None = None,
    ) -> None:
        X = np.array(X, dtype=np.float64, copy=True)
        if X.ndim != 2:
            raise ValueError("X must be 2D")

        labels = [str(label) for label in labels]
        if len(labels) != X.shape[0]:
            raise ValueError("labels must have the same number of rows as X")

        if feature_names is None:
            feature_names = [f"feature{j}" for j in range(X.shape[1])]
        feature_names = tuple(str(name) for name in feature_names)
        if len(feature_names) != X.shape[1]:
            raise ValueError("feature_names length must match number of features")
        if len(set(feature_names)) != len(feature_names):
            raise ValueError("feature_names must be unique")

        if sample_ids is None:
            sample_ids = range(X.shape[0])
        sample_ids = np.asarray(list(sample_ids), dtype=np.int64)
        if sample_ids.shape != (X.shape[0],):
            raise ValueError("sample_ids must have one entry per row")

        classes: list[str] = []
        class_index: dict[str, int] = {}
        codes = np.empty(len(labels), dtype=np.int64)
        for i, label in enumerate(labels):
            if label not in class_index:
                class_index[label] = len(classes)
                classes.append(label)
            codes[i] = class_index[label]

        X.setflags(write=False)
        codes.setflags(write=False)
        sample_ids.setflags(write=False)

        self.X = X
        self.y = codes
        self.labels = tuple(labels)
        self.feature_names = feature_names
        self.sample_ids = sample_ids
        self.classes = tuple(classes)
        self._class_index = class_index
        self._feature_index = {name: j for j, name in enumerate(feature_names)}

    @classmethod
    def from_samples(
        cls,
        samples: Sequence[Sample],
        feature_names: Sequence[str] | None = None,
    ) -> "Dataset":
        if feature_names is None:
            feature_names = list(samples[0].features) if samples else []
        for sample in samples:
            if sample.label is None:
                raise ValueError(f"Sample {sample.sample_id} has no label")
        X = np.array(
            [sample.vector(feature_names) for sample in samples],
            dtype=np.float64,
        ).reshape(len(samples), len(feature_names))
        return cls(
            X=X,
            labels=[sample.label for sample in samples],
            feature_names=feature_names,
            sample_ids=[sample.sample_id for sample in samples],
        )

    def __len__(self) -> int:
        return int(self.X.shape[0])

    @property
    def n_features(self) -> int:
        return int(self.X.shape[1])

    @property
    def n_classes(self) -> int:
        return len(self.classes)

    def feature_index(self, name: str) -> int:
        try:
            return self._feature_index[name]
        except KeyError:
            raise ValueError(f"Unknown feature: {name!r}") from None

    def class_code(self, label: str) -> int:
        try:
            return self._class_index[label]
        except KeyError:
            raise ValueError(f"Unknown class label: {label!r}") from None

    def sample(self, index: int) -> Sample:
        row = self.X[index]
        return Sample(
            sample_id=int(self.sample_ids[index]),
            features={name: float(row[j]) for j, name in enumerate(self.feature_names)},
            label=self.labels[index],
        )

    def samples(self) -> list[Sample]:
        return [self.sample(i) for i in range(len(self))]
