from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np

from linfa.errors import ShapeMismatchError
from linfa.params import RandomParams, check_int
from linfa.traits import Transform


@dataclass(frozen=True)
class RandomProjection(RandomParams, Transform):
    """Gaussian random projection to `target_dim` dimensions.

    Entries of the projection matrix are drawn from N(0, 1 / target_dim).
    With a seed (or the default seed) the same input always maps to the same
    output; with an explicit rng every call draws a new matrix.
    """

    target_dim: int = 2

    def with_target_dim(self, target_dim: int) -> "RandomProjection":
        return replace(self, target_dim=target_dim)

    def check(self) -> None:
        super().check()
        check_int("target_dim", self.target_dim, minimum=1)

    def projection_matrix(self, nfeatures: int) -> np.ndarray:
        """(nfeatures, target_dim) matrix drawn from the configured random source."""
        if self.target_dim > nfeatures:
            raise ShapeMismatchError(
                f"cannot project {nfeatures} features onto {self.target_dim} dimensions"
            )
        rng = self.random_source()
        return rng.normal(scale=1.0 / np.sqrt(self.target_dim), size=(nfeatures, self.target_dim))

    def _transform(self, records: np.ndarray) -> np.ndarray:
        projection = self.projection_matrix(records.shape[1])
        return (records @ projection).astype(records.dtype)
