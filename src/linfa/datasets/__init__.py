from __future__ import annotations

# built-in loaders registration
from linfa.datasets import csv_loader as _csv_loader  # noqa: F401
from linfa.datasets import synthetic as _synthetic  # noqa: F401
from linfa.datasets.dataset import Dataset, as_records, as_targets
from linfa.datasets.registry import (
    DatasetLoader,
    DatasetSpec,
    list_loaders,
    load_dataset,
    register_loader,
)
from linfa.datasets.synthetic import generate_blobs

__all__ = [
    "Dataset",
    "DatasetLoader",
    "DatasetSpec",
    "as_records",
    "as_targets",
    "generate_blobs",
    "list_loaders",
    "load_dataset",
    "register_loader",
]
