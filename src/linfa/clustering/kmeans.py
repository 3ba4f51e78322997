from __future__ import annotations

import logging
from dataclasses import dataclass, replace

import numpy as np

from linfa.datasets.dataset import Dataset
from linfa.errors import InvalidStateError
from linfa.params import RandomParams, check_float, check_int
from linfa.traits import Fit, Predict

logger = logging.getLogger(__name__)

INIT_METHODS = ("kmeans++", "random")


def _squared_distances(records: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    diff = records[:, None, :] - centroids[None, :, :]
    return np.sum(diff**2, axis=2)


def _closest_centroid(records: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    return np.argmin(_squared_distances(records, centroids), axis=1)


def _kmeans_plusplus(records: np.ndarray, n_clusters: int, rng: np.random.Generator) -> np.ndarray:
    n = records.shape[0]
    centroids = np.empty((n_clusters, records.shape[1]), dtype=records.dtype)
    centroids[0] = records[rng.integers(n)]
    closest = _squared_distances(records, centroids[:1])[:, 0]
    for k in range(1, n_clusters):
        weights = closest.astype(np.float64)
        total = weights.sum()
        if total > 0:
            idx = rng.choice(n, p=weights / total)
        else:
            # every sample coincides with a chosen centroid
            idx = rng.integers(n)
        centroids[k] = records[idx]
        closest = np.minimum(closest, _squared_distances(records, centroids[k : k + 1])[:, 0])
    return centroids


def _update_centroids(
    records: np.ndarray, assignments: np.ndarray, centroids: np.ndarray
) -> np.ndarray:
    updated = centroids.copy()
    for k in range(centroids.shape[0]):
        members = records[assignments == k]
        # an empty cluster keeps its previous position
        if members.shape[0] > 0:
            updated[k] = members.mean(axis=0)
    return updated


@dataclass(frozen=True)
class KMeansParams(RandomParams, Fit):
    """Hyperparameters of K-means clustering (Lloyd iterations).

    - n_clusters: number of centroids, >= 1 and at most the number of samples
    - max_n_iterations: iteration cap per run, >= 1
    - tolerance: stop once the centroids move less than this (L2 norm), > 0
    - n_runs: independent initializations, the lowest inertia wins, >= 1
    - init: "kmeans++" or "random"
    """

    n_clusters: int = 3
    max_n_iterations: int = 300
    tolerance: float = 1e-4
    n_runs: int = 10
    init: str = "kmeans++"

    supervised = False

    def with_n_clusters(self, n_clusters: int) -> "KMeansParams":
        return replace(self, n_clusters=n_clusters)

    def with_max_n_iterations(self, max_n_iterations: int) -> "KMeansParams":
        return replace(self, max_n_iterations=max_n_iterations)

    def with_tolerance(self, tolerance: float) -> "KMeansParams":
        return replace(self, tolerance=tolerance)

    def with_n_runs(self, n_runs: int) -> "KMeansParams":
        return replace(self, n_runs=n_runs)

    def with_init(self, init: str) -> "KMeansParams":
        return replace(self, init=init)

    def check(self) -> None:
        super().check()
        check_int("n_clusters", self.n_clusters, minimum=1)
        check_int("max_n_iterations", self.max_n_iterations, minimum=1)
        check_float("tolerance", self.tolerance, minimum=0.0, inclusive=False)
        check_int("n_runs", self.n_runs, minimum=1)
        if self.init not in INIT_METHODS:
            raise InvalidStateError(f"init must be one of {INIT_METHODS}, got {self.init!r}")

    def _init_centroids(self, records: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        if self.init == "random":
            idx = rng.choice(records.shape[0], size=self.n_clusters, replace=False)
            return records[idx].copy()
        return _kmeans_plusplus(records, self.n_clusters, rng)

    def check_data(self, dataset: Dataset) -> None:
        if self.n_clusters > dataset.nsamples():
            raise InvalidStateError(
                f"n_clusters ({self.n_clusters}) exceeds the number of samples "
                f"({dataset.nsamples()})"
            )

    def _fit(self, dataset: Dataset) -> "KMeans":
        records = dataset.records
        rng = self.random_source()
        best: KMeans | None = None
        for run in range(self.n_runs):
            centroids = self._init_centroids(records, rng)
            n_iterations = 0
            for n_iterations in range(1, self.max_n_iterations + 1):
                assignments = _closest_centroid(records, centroids)
                updated = _update_centroids(records, assignments, centroids)
                shift = float(np.linalg.norm(updated - centroids))
                centroids = updated
                if shift < self.tolerance:
                    break

            distances = _squared_distances(records, centroids)
            inertia = float(distances.min(axis=1).sum())
            logger.debug(
                "kmeans run %d: inertia=%.6g after %d iterations", run, inertia, n_iterations
            )
            if best is None or inertia < best.inertia:
                best = KMeans(centroids=centroids, inertia=inertia, n_iterations=n_iterations)

        return best


@dataclass(eq=False)
class KMeans(Predict):
    """Fitted K-means: predicts the index of the closest centroid."""

    centroids: np.ndarray
    inertia: float
    n_iterations: int

    @property
    def nfeatures(self) -> int:
        return int(self.centroids.shape[1])

    @property
    def n_clusters(self) -> int:
        return int(self.centroids.shape[0])

    def _predict(self, records: np.ndarray) -> np.ndarray:
        if records.shape[0] == 0:
            return np.empty(0, dtype=np.int64)
        return _closest_centroid(records, self.centroids).astype(np.int64)
