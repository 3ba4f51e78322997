from __future__ import annotations

from linfa.bayes.gaussian_nb import GaussianNb, GaussianNbParams

__all__ = ["GaussianNb", "GaussianNbParams"]
