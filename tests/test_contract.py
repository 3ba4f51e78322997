from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pytest

from linfa import (
    Dataset,
    EmptyInputError,
    Fit,
    InvalidStateError,
    LinfaError,
    Params,
    Predict,
    ShapeMismatchError,
)
from linfa.bayes import GaussianNbParams
from linfa.clustering import KMeansParams

CALLS: list[str] = []


@dataclass(eq=False)
class MeanModel(Predict):
    mean: np.ndarray

    @property
    def nfeatures(self) -> int:
        return int(self.mean.shape[0])

    def _predict(self, records: np.ndarray) -> np.ndarray:
        return records @ self.mean


@dataclass(frozen=True)
class MeanParams(Params, Fit):
    """Records every call into the fit body."""

    scale: float = 1.0

    def check(self) -> None:
        if self.scale <= 0:
            raise InvalidStateError("scale must be > 0")

    def _fit(self, dataset: Dataset) -> MeanModel:
        CALLS.append("fit")
        return MeanModel(mean=dataset.records.mean(axis=0) * self.scale)


@pytest.fixture(autouse=True)
def _reset_calls():
    CALLS.clear()
    yield


def _data() -> Dataset:
    rng = np.random.default_rng(0)
    return Dataset(rng.normal(size=(10, 3)), np.arange(10) % 2)


def test_error_taxonomy() -> None:
    for cls in (ShapeMismatchError, InvalidStateError, EmptyInputError):
        assert issubclass(cls, LinfaError)
        assert issubclass(cls, ValueError)


def test_invalid_hyperparameters_fail_before_fit_body() -> None:
    with pytest.raises(InvalidStateError):
        MeanParams(scale=-1.0).fit(_data())
    assert CALLS == []


def test_hyperparameters_are_checked_before_the_dataset() -> None:
    # both are invalid; the hyperparameter error wins
    empty = Dataset(np.zeros((0, 3)), np.zeros(0))
    with pytest.raises(InvalidStateError):
        MeanParams(scale=0.0).fit(empty)


def test_empty_dataset_is_rejected() -> None:
    with pytest.raises(EmptyInputError):
        MeanParams().fit(Dataset(np.zeros((0, 3)), np.zeros(0)))
    assert CALLS == []


def test_supervised_fit_requires_targets() -> None:
    with pytest.raises(ShapeMismatchError):
        MeanParams().fit(Dataset(np.zeros((4, 3))))


def test_fit_rejects_non_dataset() -> None:
    with pytest.raises(TypeError):
        MeanParams().fit(np.zeros((4, 3)))


def test_fit_leaves_dataset_untouched() -> None:
    d = _data()
    before = d.records.copy()

    MeanParams(scale=2.0).fit(d)

    assert np.array_equal(d.records, before)
    assert CALLS == ["fit"]


def test_predict_width_mismatch() -> None:
    model = MeanParams().fit(_data())
    with pytest.raises(ShapeMismatchError):
        model.predict(np.zeros((2, 4)))


def test_predict_is_row_aligned() -> None:
    d = _data()
    model = GaussianNbParams().fit(d)
    perm = np.random.default_rng(3).permutation(d.nsamples())

    out = model.predict(d.records)
    out_perm = model.predict(d.records[perm])

    assert out.shape == (10,)
    assert np.array_equal(out[perm], out_perm)


def test_predict_on_empty_records() -> None:
    model = KMeansParams().with_seed(42).fit(Dataset(_data().records))
    assert model.predict(np.zeros((0, 3))).shape == (0,)


def test_dataset_out_predict_keeps_records() -> None:
    d = _data()
    model = MeanParams().fit(d)

    out = model.predict(d)

    assert isinstance(out, Dataset)
    assert out.records is d.records or np.array_equal(out.records, d.records)
    assert np.allclose(out.targets, d.records @ model.mean)
    # the input keeps its own targets
    assert np.array_equal(d.targets, np.arange(10) % 2)


def test_seeded_kmeans_on_ten_samples_is_reproducible() -> None:
    d = Dataset(_data().records)
    params = KMeansParams().with_seed(42)

    first = params.fit(d).predict(d.records)
    second = KMeansParams().with_seed(42).fit(d).predict(d.records)

    assert first.shape == (10,)
    assert np.array_equal(first, second)
    assert set(first.tolist()) <= {0, 1, 2}


def test_zero_clusters_is_invalid_state() -> None:
    d = Dataset(_data().records)
    with pytest.raises(InvalidStateError):
        KMeansParams().with_n_clusters(0).fit(d)


def test_negative_var_smoothing_is_invalid_state() -> None:
    with pytest.raises(InvalidStateError):
        GaussianNbParams().with_var_smoothing(-1e-9).fit(_data())
