from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

import numpy as np

from linfa.datasets.dataset import as_records
from linfa.errors import InvalidStateError, ShapeMismatchError
from linfa.params import Params, check_float, check_int
from linfa.traits import Transform

METHODS = ("linear", "gaussian", "polynomial")


def _pairwise(method: str, a: np.ndarray, b: np.ndarray, eps: float, constant: float, degree: int):
    if method == "linear":
        return a @ b.T
    if method == "polynomial":
        return (a @ b.T + constant) ** degree
    # gaussian: exp(-||a - b||^2 / eps)
    sq = np.sum(a**2, axis=1)[:, None] + np.sum(b**2, axis=1)[None, :] - 2.0 * (a @ b.T)
    return np.exp(-np.maximum(sq, 0.0) / eps)


@dataclass(frozen=True)
class Kernel(Params, Transform):
    """Dense kernel matrix of a set of records.

    - method: "linear" (a.b), "gaussian" (exp(-|a-b|^2 / eps)) or
      "polynomial" ((a.b + constant)^degree)
    - eps: gaussian bandwidth, > 0
    - constant: polynomial offset, >= 0
    - degree: polynomial degree, >= 1
    """

    method: str = "linear"
    eps: float = 1.0
    constant: float = 0.0
    degree: int = 2

    def linear(self) -> "Kernel":
        return replace(self, method="linear")

    def gaussian(self, eps: float) -> "Kernel":
        return replace(self, method="gaussian", eps=eps)

    def polynomial(self, constant: float, degree: int) -> "Kernel":
        return replace(self, method="polynomial", constant=constant, degree=degree)

    def check(self) -> None:
        if self.method not in METHODS:
            raise InvalidStateError(f"method must be one of {METHODS}, got {self.method!r}")
        if self.method == "gaussian":
            check_float("eps", self.eps, minimum=0.0, inclusive=False)
        if self.method == "polynomial":
            check_float("constant", self.constant, minimum=0.0)
            check_int("degree", self.degree, minimum=1)

    def evaluate(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        out = _pairwise(self.method, a, b, self.eps, self.constant, self.degree)
        return out.astype(np.result_type(a.dtype, b.dtype), copy=False)

    def _transform(self, records: np.ndarray) -> "KernelMatrix":
        return KernelMatrix(kernel=self, records=records, matrix=self.evaluate(records, records))


@dataclass(eq=False)
class KernelMatrix:
    """Kernel of `records` with itself, (n_samples, n_samples).

    Keeps a reference to the records it was computed from; kernel methods
    need them to evaluate new samples.
    """

    kernel: Kernel
    records: np.ndarray
    matrix: np.ndarray

    def __array__(self, dtype: Any = None, copy: Any = None) -> np.ndarray:
        if dtype is None:
            return self.matrix
        return self.matrix.astype(dtype)

    def nsamples(self) -> int:
        return int(self.matrix.shape[0])

    def is_linear(self) -> bool:
        return self.kernel.method == "linear"

    def diagonal(self) -> np.ndarray:
        return np.diagonal(self.matrix).copy()

    def column(self, i: int) -> np.ndarray:
        return self.matrix[:, i].copy()

    def evaluate(self, x: Any) -> np.ndarray:
        """Kernel between new samples and the stored records, (n_new, n_samples)."""
        x = as_records(x)
        if x.shape[1] != self.records.shape[1]:
            raise ShapeMismatchError(
                f"kernel was computed on {self.records.shape[1]} features, got {x.shape[1]}"
            )
        return self.kernel.evaluate(x, self.records)
