"""Contracts every algorithm in the framework satisfies.

- Fit: hyperparameters + Dataset -> fitted model
- IncrementalFit: (model | None) + Dataset batch -> updated model
- Predict / PredictProba: fitted model + records or Dataset -> predictions
- Transform: transformer + data -> transformed data (no separate model)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

import numpy as np

from linfa.datasets.dataset import Dataset, as_records
from linfa.errors import EmptyInputError, ShapeMismatchError

logger = logging.getLogger(__name__)

M = TypeVar("M")


def check_dataset(dataset: Dataset, *, supervised: bool) -> None:
    if not isinstance(dataset, Dataset):
        raise TypeError(f"expected a Dataset, got {type(dataset).__name__}")
    if dataset.nsamples() == 0:
        raise EmptyInputError("cannot fit on a dataset without samples")
    if supervised and not dataset.has_targets():
        raise ShapeMismatchError("supervised fit requires a dataset with targets")


class Fit(ABC, Generic[M]):
    """Training entry point.

    `fit` validates the hyperparameters first, then the dataset, then
    `check_data` (hyperparameters against this dataset), and only then
    enters `_fit`. A failed validation never reaches `_fit`, so no model
    (partial or otherwise) is built.
    """

    supervised: bool = True

    def check(self) -> None:
        """Hyperparameter validation; provided by `linfa.params.Params`."""

    def check_data(self, dataset: Dataset) -> None:
        """Preconditions tying the hyperparameters to this dataset."""

    def fit(self, dataset: Dataset) -> M:
        self.check()
        check_dataset(dataset, supervised=self.supervised)
        self.check_data(dataset)
        logger.debug(
            "fit %s on %d samples x %d features",
            type(self).__name__,
            dataset.nsamples(),
            dataset.nfeatures(),
        )
        return self._fit(dataset)

    @abstractmethod
    def _fit(self, dataset: Dataset) -> M:
        raise NotImplementedError


class IncrementalFit(ABC, Generic[M]):
    """Batch-wise training: fold `fit_with` over dataset chunks."""

    supervised: bool = True

    def check(self) -> None:
        """Hyperparameter validation; provided by `linfa.params.Params`."""

    def check_batch(self, model: M | None, dataset: Dataset) -> None:
        """Preconditions tying the current model to the next batch."""

    def fit_with(self, model: M | None, dataset: Dataset) -> M:
        self.check()
        check_dataset(dataset, supervised=self.supervised)
        self.check_batch(model, dataset)
        return self._fit_with(model, dataset)

    @abstractmethod
    def _fit_with(self, model: M | None, dataset: Dataset) -> M:
        raise NotImplementedError


class Predict(ABC):
    """Apply a fitted model.

    - Dataset in -> Dataset out (same records, predicted targets)
    - array-like in -> 1D array out, row i predicts input row i
    """

    @property
    @abstractmethod
    def nfeatures(self) -> int:
        """Input width the model was fitted on."""

    def _prepare(self, x: Any) -> np.ndarray:
        records = as_records(x)
        if records.shape[1] != self.nfeatures:
            raise ShapeMismatchError(
                f"model expects {self.nfeatures} features, got {records.shape[1]}"
            )
        return records

    def predict(self, x: Any) -> Any:
        if isinstance(x, Dataset):
            return x.with_targets(self._predict(self._prepare(x.records)))
        return self._predict(self._prepare(x))

    @abstractmethod
    def _predict(self, records: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class PredictProba(Predict):
    """Models that also score every class."""

    def predict_proba(self, x: Any) -> np.ndarray:
        """(n_samples, n_classes) membership probabilities."""
        if isinstance(x, Dataset):
            x = x.records
        return self._predict_proba(self._prepare(x))

    @abstractmethod
    def _predict_proba(self, records: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class Transform(ABC):
    """Data-to-data mapping; the instance is both configuration and model."""

    def check(self) -> None:
        """Hyperparameter validation; provided by `linfa.params.Params`."""

    def transform(self, x: Any) -> Any:
        self.check()
        if isinstance(x, Dataset):
            out = np.asarray(self._transform(x.records))
            return Dataset(records=out, targets=x.targets, meta=x.meta)
        return self._transform(as_records(x))

    @abstractmethod
    def _transform(self, records: np.ndarray) -> Any:
        raise NotImplementedError
