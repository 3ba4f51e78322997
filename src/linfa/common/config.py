from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from linfa.errors import InvalidStateError

_DTYPES = ("float64", "float32")


@dataclass(frozen=True)
class Settings:
    dtype: str
    default_seed: int
    artifacts_dir: str
    log_level: str


def get_settings() -> Settings:
    # a local .env is read for development, deployed environments rely on env vars only
    load_dotenv(override=False)

    dtype = os.getenv("LINFA_DTYPE", "float64").strip().lower()
    if dtype not in _DTYPES:
        raise InvalidStateError(f"LINFA_DTYPE must be one of {_DTYPES}, got {dtype!r}")

    raw_seed = os.getenv("LINFA_SEED", "42").strip()
    try:
        default_seed = int(raw_seed)
    except ValueError as e:
        raise InvalidStateError(f"LINFA_SEED must be an integer, got {raw_seed!r}") from e
    if default_seed < 0:
        raise InvalidStateError(f"LINFA_SEED must be non-negative, got {default_seed}")

    artifacts_dir = os.getenv("LINFA_ARTIFACTS", "artifacts")
    log_level = os.getenv("LINFA_LOG_LEVEL", "WARNING").strip().upper()

    return Settings(
        dtype=dtype,
        default_seed=default_seed,
        artifacts_dir=artifacts_dir,
        log_level=log_level,
    )
