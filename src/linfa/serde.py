"""Optional persistence.

Hyperparameters round-trip through JSON and are always available. Fitted
models are pickled with joblib, installed through the `serde` extra; nothing
in fit/predict depends on this module.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, TypeVar

from linfa.common.version import get_build_info
from linfa.params import Params

P = TypeVar("P", bound=Params)


def require_joblib() -> Any:
    try:
        import joblib

        return joblib
    except ImportError as e:  # pragma: no cover
        raise RuntimeError(
            "joblib is required to persist models (pip install 'linfa[serde]')"
        ) from e


def params_to_json(params: Params, *, indent: int | None = 2) -> str:
    return json.dumps(
        {"type": type(params).__name__, "params": params.to_dict()},
        ensure_ascii=False,
        indent=indent,
    )


def params_from_json(text: str, cls: type[P]) -> P:
    """Accepts both `{"type": ..., "params": {...}}` and a bare `{...}` of values."""
    obj = json.loads(text)
    if not isinstance(obj, dict):
        raise ValueError("hyperparameter JSON must be an object")
    if "params" in obj and "type" in obj:
        if obj["type"] != cls.__name__:
            raise ValueError(f"JSON describes {obj['type']}, expected {cls.__name__}")
        obj = obj["params"]
    if not isinstance(obj, dict):
        raise ValueError("hyperparameter values must be an object")
    return cls.from_dict(obj)


def save_params(params: Params, path: str | Path) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(params_to_json(params), encoding="utf-8")
    return p


def load_params(path: str | Path, cls: type[P]) -> P:
    return params_from_json(Path(path).read_text(encoding="utf-8"), cls)


def save_model(model: Any, path: str | Path, *, params: Params | None = None) -> Path:
    """Dump a fitted model together with the hyperparameters that produced it."""
    joblib = require_joblib()

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(
        {
            "model": model,
            "params": None if params is None else params_to_json(params, indent=None),
            "build": get_build_info(),
        },
        p,
    )
    return p


def load_model(path: str | Path) -> Any:
    joblib = require_joblib()

    obj = joblib.load(Path(path))
    if isinstance(obj, dict) and "model" in obj:
        return obj["model"]
    return obj
