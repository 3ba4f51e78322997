from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

import numpy as np
import pandas as pd

from linfa.errors import InvalidStateError, ShapeMismatchError
from linfa.floats import result_dtype


def _readonly(a: np.ndarray) -> np.ndarray:
    view = a.view()
    view.flags.writeable = False
    return view


def as_records(x: Any, dtype: Any = None) -> np.ndarray:
    """Coerce an array-like to a 2D float array (n_samples, n_features).

    float32/float64 inputs keep their element type, everything else is
    converted (see `linfa.floats.result_dtype`) unless `dtype` is given.
    """
    if isinstance(x, pd.DataFrame):
        x = x.to_numpy()
    a = np.asarray(x)
    if a.ndim != 2:
        raise ShapeMismatchError(
            f"records must be 2D (n_samples, n_features), got shape={a.shape}"
        )
    target = np.dtype(dtype) if dtype is not None else result_dtype(a.dtype)
    if a.dtype != target:
        a = a.astype(target)
    return a


def as_targets(y: Any) -> np.ndarray:
    """Coerce an array-like to a 1D label array. A single column is flattened."""
    if isinstance(y, (pd.Series, pd.DataFrame)):
        y = y.to_numpy()
    a = np.asarray(y)
    if a.ndim == 2 and a.shape[1] == 1:
        a = a.ravel()
    if a.ndim != 1:
        raise ShapeMismatchError(f"targets must be 1D (n_samples,), got shape={a.shape}")
    return a


@dataclass(frozen=True, eq=False)
class Dataset:
    """Records paired with (optional) targets.

    - records: (n_samples, n_features), float32 or float64
    - targets: (n_samples,) labels of any element type, or None (unsupervised)
    - feature_names: optional, one name per column
    - meta: free-form metadata (source, fingerprint, ...)

    Shapes are validated once here. Both arrays are stored as read-only views
    so an algorithm cannot write through the dataset.
    """

    records: np.ndarray
    targets: np.ndarray | None = None
    feature_names: list[str] | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        records = _readonly(as_records(self.records))
        object.__setattr__(self, "records", records)

        if self.targets is not None:
            targets = as_targets(self.targets)
            if targets.shape[0] != records.shape[0]:
                raise ShapeMismatchError(
                    f"records/targets size mismatch: {records.shape[0]} vs {targets.shape[0]}"
                )
            object.__setattr__(self, "targets", _readonly(targets))

        if self.feature_names is not None:
            names = [str(n) for n in self.feature_names]
            if len(names) != records.shape[1]:
                raise ShapeMismatchError(
                    f"feature_names has {len(names)} entries for {records.shape[1]} features"
                )
            object.__setattr__(self, "feature_names", names)

        object.__setattr__(self, "meta", dict(self.meta or {}))

    def nsamples(self) -> int:
        return int(self.records.shape[0])

    def nfeatures(self) -> int:
        return int(self.records.shape[1])

    def has_targets(self) -> bool:
        return self.targets is not None

    def _require_targets(self) -> np.ndarray:
        if self.targets is None:
            raise ShapeMismatchError("dataset has no targets")
        return self.targets

    def labels(self) -> np.ndarray:
        """Distinct target values, sorted."""
        return np.unique(self._require_targets())

    def label_frequencies(self) -> dict[Any, int]:
        values, counts = np.unique(self._require_targets(), return_counts=True)
        return {v.item() if hasattr(v, "item") else v: int(c) for v, c in zip(values, counts)}

    def with_targets(self, targets: Any) -> "Dataset":
        """Same records, new targets."""
        return replace(self, targets=targets)

    def with_feature_names(self, names: Sequence[str]) -> "Dataset":
        return replace(self, feature_names=list(names))

    def _take(self, index: Any) -> "Dataset":
        targets = None if self.targets is None else self.targets[index]
        return Dataset(
            records=self.records[index],
            targets=targets,
            feature_names=self.feature_names,
            meta=self.meta,
        )

    def axis_chunks(self, size: int) -> Iterator["Dataset"]:
        """Consecutive sub-datasets of at most `size` samples (last one may be shorter)."""
        if size < 1:
            raise InvalidStateError(f"chunk size must be >= 1, got {size}")
        for start in range(0, self.nsamples(), size):
            yield self._take(slice(start, start + size))

    def split_with_ratio(self, ratio: float) -> tuple["Dataset", "Dataset"]:
        """Split into (head, tail) where head holds `ratio` of the samples.

        Row order is kept; shuffle first for a random split.
        """
        if not 0.0 < ratio < 1.0:
            raise InvalidStateError(f"ratio must be in (0, 1), got {ratio}")
        n = int(np.floor(self.nsamples() * ratio))
        return self._take(slice(0, n)), self._take(slice(n, None))

    def shuffle(self, rng: np.random.Generator) -> "Dataset":
        """New dataset with rows permuted; record/target pairing is kept."""
        return self._take(rng.permutation(self.nsamples()))
