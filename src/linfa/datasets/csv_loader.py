from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from linfa.datasets.dataset import Dataset
from linfa.datasets.fingerprint import sha256_file
from linfa.datasets.registry import DatasetSpec, register_loader
from linfa.floats import float_dtype


def _bool(v: Any, default: bool) -> bool:
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    s = str(v).strip().lower()
    if s in {"1", "true", "t", "yes", "y"}:
        return True
    if s in {"0", "false", "f", "no", "n"}:
        return False
    return default


def load_csv_dataset(spec: DatasetSpec) -> Dataset:
    """Load a CSV file into a Dataset.

    spec.params keys:
      - path (required)
      - target_col (optional; without it the dataset has no targets)
      - feature_cols (optional)
      - one_hot (default: True)
      - dropna (default: True)
      - sep (default: ',')
      - encoding (optional)
      - dtype (default: LINFA_DTYPE)
    """
    params = spec.params
    path = params.get("path")
    target_col = params.get("target_col")
    if not path:
        raise ValueError("csv loader requires params.path")

    p = Path(str(path))
    if not p.exists():
        raise FileNotFoundError(str(p))

    sep = str(params.get("sep") or ",")
    encoding = params.get("encoding")
    one_hot = _bool(params.get("one_hot"), True)
    dropna = _bool(params.get("dropna"), True)
    dtype = float_dtype(params.get("dtype"))

    df = pd.read_csv(p, sep=sep, encoding=encoding)
    if target_col is not None and target_col not in df.columns:
        raise ValueError(f"target_col not found: {target_col}")

    feature_cols = params.get("feature_cols")
    if feature_cols is None:
        x_df = df.drop(columns=[target_col]) if target_col is not None else df
    else:
        cols = list(feature_cols)
        missing = [c for c in cols if c not in df.columns]
        if missing:
            raise ValueError(f"feature_cols not found: {missing}")
        x_df = df[cols]

    y = df[target_col] if target_col is not None else None

    if dropna:
        mask = ~x_df.isna().any(axis=1)
        if y is not None:
            mask &= ~y.isna()
        x_df = x_df.loc[mask]
        y = y.loc[mask] if y is not None else None

    if one_hot:
        x_df = pd.get_dummies(x_df, drop_first=False)

    targets: np.ndarray | None = None
    target_classes: list[str] | None = None
    if y is not None:
        if y.dtype == bool or pd.api.types.is_numeric_dtype(y.dtype):
            targets = y.to_numpy()
        else:
            # categorical labels stay as strings, any number of classes
            targets = y.astype(str).to_numpy()
            target_classes = sorted(set(targets.tolist()))

    X = x_df.to_numpy(dtype=dtype)
    feature_names = [str(c) for c in x_df.columns]

    meta: dict[str, Any] = {
        "source": {"type": "csv", "path": str(p)},
        "fingerprint": {"sha256": sha256_file(p)},
        "target_col": None if target_col is None else str(target_col),
        "feature_cols": feature_names,
        "n_rows": int(X.shape[0]),
        "n_features": int(X.shape[1]),
    }
    if target_classes is not None:
        meta["target_classes"] = target_classes

    return Dataset(records=X, targets=targets, feature_names=feature_names, meta=meta)


# built-in
register_loader("csv", load_csv_dataset, overwrite=True)
