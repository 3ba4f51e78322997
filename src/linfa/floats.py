from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from linfa.common.config import get_settings
from linfa.errors import InvalidStateError

FLOAT_DTYPES: tuple[np.dtype, ...] = (np.dtype(np.float32), np.dtype(np.float64))


def default_dtype() -> np.dtype:
    return np.dtype(get_settings().dtype)


def float_dtype(dtype: Any = None) -> np.dtype:
    """Resolve a requested element type to float32 or float64.

    None resolves to the configured default (LINFA_DTYPE).
    """
    if dtype is None:
        return default_dtype()
    dt = np.dtype(dtype)
    if dt not in FLOAT_DTYPES:
        raise InvalidStateError(f"float dtype must be float32 or float64, got {dt}")
    return dt


def result_dtype(dt: np.dtype) -> np.dtype:
    """Element type used for an input array of dtype `dt`."""
    if dt in FLOAT_DTYPES:
        return dt
    if np.issubdtype(dt, np.floating):
        # float16 / longdouble
        return np.dtype(np.float64)
    return default_dtype()


@dataclass(frozen=True)
class FloatInfo:
    """Constants of one float element type."""

    dtype: np.dtype

    @classmethod
    def of(cls, dtype: Any) -> "FloatInfo":
        return cls(dtype=float_dtype(dtype))

    @property
    def zero(self) -> np.floating:
        return self.dtype.type(0)

    @property
    def one(self) -> np.floating:
        return self.dtype.type(1)

    @property
    def eps(self) -> np.floating:
        return np.finfo(self.dtype).eps

    def cast(self, value: float) -> np.floating:
        return self.dtype.type(value)
