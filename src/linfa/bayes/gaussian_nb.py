"""Gaussian Naive Bayes.

The likelihood of a feature P(x_i | y) is assumed Gaussian; per-class mean
and variance are maximum-likelihood estimates, merged online when training
batch by batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

import numpy as np

from linfa.datasets.dataset import Dataset
from linfa.errors import ShapeMismatchError
from linfa.floats import FloatInfo
from linfa.params import Params, check_float
from linfa.traits import Fit, IncrementalFit, PredictProba

logger = logging.getLogger(__name__)


@dataclass
class _ClassInfo:
    class_count: int
    theta: np.ndarray
    sigma: np.ndarray


def _numeric_labels(dtype: np.dtype) -> bool:
    return dtype == np.bool_ or np.issubdtype(dtype, np.number)


def _update_mean_variance(
    count_old: int, mu_old: np.ndarray, var_old: np.ndarray, x_new: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    """Merge the mean/variance of `count_old` samples with a new batch."""
    if x_new.shape[0] == 0:
        return mu_old, var_old

    count_new = x_new.shape[0]
    mu_new = x_new.mean(axis=0)
    var_new = x_new.var(axis=0)

    if count_old == 0:
        return mu_new, var_new

    count_total = count_old + count_new
    mu = (mu_new * count_new + mu_old * count_old) / count_total

    # combine sums of squared differences, weighted by the number of observations
    ssd = var_old * count_old + var_new * count_new
    ssd = ssd + (count_new * count_old / count_total) * (mu_old - mu_new) ** 2
    return mu, ssd / count_total


@dataclass(frozen=True)
class GaussianNbParams(Params, Fit, IncrementalFit):
    """Hyperparameters of Gaussian Naive Bayes.

    - var_smoothing: portion of the largest feature variance added to every
      variance for calculation stability. Domain: finite, >= 0.
    """

    var_smoothing: float = 1e-9

    def with_var_smoothing(self, var_smoothing: float) -> "GaussianNbParams":
        return replace(self, var_smoothing=var_smoothing)

    def check(self) -> None:
        check_float("var_smoothing", self.var_smoothing, minimum=0.0)

    def _fit(self, dataset: Dataset) -> "GaussianNb":
        return self._fit_with(None, dataset)

    def check_batch(self, model: "GaussianNb | None", dataset: Dataset) -> None:
        if model is None:
            return
        if model.nfeatures != dataset.nfeatures():
            raise ShapeMismatchError(
                f"model was fitted on {model.nfeatures} features, batch has {dataset.nfeatures()}"
            )
        if _numeric_labels(model.classes.dtype) != _numeric_labels(dataset.targets.dtype):
            raise ShapeMismatchError(
                f"batch labels ({dataset.targets.dtype}) cannot be mixed with "
                f"the model classes ({model.classes.dtype})"
            )

    def _fit_with(self, model: "GaussianNb | None", dataset: Dataset) -> "GaussianNb":
        x = dataset.records
        y = dataset.targets

        info = FloatInfo.of(x.dtype)
        # a tiny variance ratio between dimensions causes numerical errors, so
        # every variance is boosted by a fraction of the largest one
        epsilon = info.cast(self.var_smoothing) * x.var(axis=0).max()

        class_info: dict = {}
        if model is not None:
            for i, label in enumerate(model.classes):
                class_info[label] = _ClassInfo(
                    class_count=int(model.class_count[i]),
                    theta=model.theta[i],
                    sigma=model.sigma[i] - epsilon,
                )

        for label in np.unique(y):
            xclass = x[y == label]
            ci = class_info.setdefault(
                label,
                _ClassInfo(
                    class_count=0,
                    theta=np.zeros(x.shape[1], dtype=x.dtype),
                    sigma=np.zeros(x.shape[1], dtype=x.dtype),
                ),
            )
            ci.theta, ci.sigma = _update_mean_variance(ci.class_count, ci.theta, ci.sigma, xclass)
            ci.class_count += xclass.shape[0]

        classes = sorted(class_info)
        counts = np.array([class_info[c].class_count for c in classes], dtype=np.int64)
        fitted = GaussianNb(
            classes=np.array(classes),
            class_count=counts,
            class_prior=(counts / counts.sum()).astype(x.dtype),
            theta=np.stack([class_info[c].theta for c in classes]).astype(x.dtype),
            sigma=np.stack([class_info[c].sigma + epsilon for c in classes]).astype(x.dtype),
            epsilon=float(epsilon),
        )
        logger.debug(
            "gaussian nb: %d classes, %d samples seen", len(classes), int(counts.sum())
        )
        return fitted


@dataclass(eq=False)
class GaussianNb(PredictProba):
    """Fitted Gaussian Naive Bayes. Row i of theta/sigma belongs to classes[i]."""

    classes: np.ndarray
    class_count: np.ndarray
    class_prior: np.ndarray
    theta: np.ndarray
    sigma: np.ndarray
    epsilon: float = field(default=0.0)

    @property
    def nfeatures(self) -> int:
        return int(self.theta.shape[1])

    def joint_log_likelihood(self, x) -> np.ndarray:
        """Unnormalized posterior log probability, (n_samples, n_classes)."""
        return self._joint_log_likelihood(self._prepare(x))

    def _joint_log_likelihood(self, records: np.ndarray) -> np.ndarray:
        n_ij = -0.5 * np.sum(np.log(2.0 * np.pi * self.sigma), axis=1)
        diff = records[:, None, :] - self.theta[None, :, :]
        n_ij = n_ij[None, :] - 0.5 * np.sum(diff**2 / self.sigma[None, :, :], axis=2)
        return n_ij + np.log(self.class_prior)[None, :]

    def _predict(self, records: np.ndarray) -> np.ndarray:
        jll = self._joint_log_likelihood(records)
        return self.classes[np.argmax(jll, axis=1)]

    def _predict_proba(self, records: np.ndarray) -> np.ndarray:
        jll = self._joint_log_likelihood(records)
        jll = jll - jll.max(axis=1, keepdims=True)
        p = np.exp(jll)
        return p / p.sum(axis=1, keepdims=True)
