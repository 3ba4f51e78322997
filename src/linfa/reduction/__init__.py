from __future__ import annotations

from linfa.reduction.random_projection import RandomProjection

__all__ = ["RandomProjection"]
