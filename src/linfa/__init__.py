"""A classical machine learning toolkit built around a small contract.

- `Dataset`: records (n_samples, n_features) paired with targets
- `Fit` / `IncrementalFit`: hyperparameters + Dataset -> fitted model
- `Predict` / `PredictProba`: fitted model + data -> predictions
- `Transform`: data -> data, the transformer is its own model
- `Params` / `RandomParams`: immutable hyperparameter builders, validated at fit time
"""

from __future__ import annotations

from linfa.datasets import Dataset, DatasetSpec, load_dataset
from linfa.errors import EmptyInputError, InvalidStateError, LinfaError, ShapeMismatchError
from linfa.floats import FLOAT_DTYPES, FloatInfo
from linfa.params import Params, RandomParams
from linfa.traits import Fit, IncrementalFit, Predict, PredictProba, Transform

__all__ = [
    "FLOAT_DTYPES",
    "Dataset",
    "DatasetSpec",
    "EmptyInputError",
    "Fit",
    "FloatInfo",
    "IncrementalFit",
    "InvalidStateError",
    "LinfaError",
    "Params",
    "Predict",
    "PredictProba",
    "RandomParams",
    "ShapeMismatchError",
    "Transform",
    "load_dataset",
]
