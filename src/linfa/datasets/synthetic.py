from __future__ import annotations

from typing import Any

import numpy as np

from linfa.common.config import get_settings
from linfa.datasets.dataset import Dataset
from linfa.datasets.registry import DatasetSpec, register_loader
from linfa.errors import InvalidStateError
from linfa.floats import float_dtype


def generate_blobs(
    n_samples: int,
    centers: np.ndarray,
    *,
    cluster_std: float = 1.0,
    rng: np.random.Generator,
    dtype: Any = None,
) -> Dataset:
    """Isotropic Gaussian blobs around `centers` (n_centers, n_features).

    Samples are dealt round-robin over the centers; the target of a sample is
    the index of its center.
    """
    centers = np.asarray(centers, dtype=float)
    if centers.ndim != 2 or centers.shape[0] == 0:
        raise InvalidStateError(f"centers must be a non-empty 2D array, got shape={centers.shape}")
    if n_samples < 1:
        raise InvalidStateError(f"n_samples must be >= 1, got {n_samples}")
    if not cluster_std > 0:
        raise InvalidStateError(f"cluster_std must be > 0, got {cluster_std}")

    labels = np.arange(n_samples) % centers.shape[0]
    noise = rng.normal(scale=cluster_std, size=(n_samples, centers.shape[1]))
    records = (centers[labels] + noise).astype(float_dtype(dtype))
    return Dataset(records=records, targets=labels)


def load_blobs_dataset(spec: DatasetSpec) -> Dataset:
    """Blobs loader.

    spec.params keys:
      - n_samples (default: 100)
      - centers (optional, explicit list of center coordinates)
      - n_centers / n_features (defaults: 3 / 2; centers drawn uniformly in [-10, 10])
      - cluster_std (default: 1.0)
      - seed (default: LINFA_SEED)
      - dtype (default: LINFA_DTYPE)
    """
    params = spec.params
    seed = params.get("seed")
    seed = get_settings().default_seed if seed is None else int(seed)
    rng = np.random.default_rng(seed)

    if params.get("centers") is not None:
        centers = np.asarray(params["centers"], dtype=float)
    else:
        n_centers = int(params.get("n_centers", 3))
        n_features = int(params.get("n_features", 2))
        if n_centers < 1 or n_features < 1:
            raise InvalidStateError("n_centers and n_features must be >= 1")
        centers = rng.uniform(-10.0, 10.0, size=(n_centers, n_features))

    dataset = generate_blobs(
        int(params.get("n_samples", 100)),
        centers,
        cluster_std=float(params.get("cluster_std", 1.0)),
        rng=rng,
        dtype=params.get("dtype"),
    )
    meta = {
        "source": {"type": "blobs", "seed": seed},
        "centers": centers.tolist(),
        "n_rows": dataset.nsamples(),
        "n_features": dataset.nfeatures(),
    }
    return Dataset(records=dataset.records, targets=dataset.targets, meta=meta)


register_loader("blobs", load_blobs_dataset, overwrite=True)
