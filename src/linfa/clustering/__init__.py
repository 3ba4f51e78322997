from __future__ import annotations

from linfa.clustering.kmeans import KMeans, KMeansParams

__all__ = ["KMeans", "KMeansParams"]
