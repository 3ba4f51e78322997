from __future__ import annotations

from typing import Any

import numpy as np

from linfa.datasets.dataset import as_records, as_targets
from linfa.errors import ShapeMismatchError


def _pair(y_true: Any, y_pred: Any) -> tuple[np.ndarray, np.ndarray]:
    t = as_targets(y_true)
    p = as_targets(y_pred)
    if t.shape[0] != p.shape[0]:
        raise ShapeMismatchError(f"y_true/y_pred size mismatch: {t.shape[0]} vs {p.shape[0]}")
    return t, p


def accuracy(y_true: Any, y_pred: Any) -> float:
    t, p = _pair(y_true, y_pred)
    return float((t == p).sum() / max(1, t.shape[0]))


def confusion_matrix(y_true: Any, y_pred: Any) -> tuple[np.ndarray, np.ndarray]:
    """(labels, counts): counts[i, j] = samples of labels[i] predicted as labels[j]."""
    t, p = _pair(y_true, y_pred)
    labels = np.unique(np.concatenate([t, p]))
    ti = np.searchsorted(labels, t)
    pi = np.searchsorted(labels, p)
    counts = np.zeros((labels.shape[0], labels.shape[0]), dtype=np.int64)
    np.add.at(counts, (ti, pi), 1)
    return labels, counts


def balanced_accuracy(y_true: Any, y_pred: Any) -> float:
    """Mean per-class recall over the classes present in y_true."""
    labels, counts = confusion_matrix(y_true, y_pred)
    support = counts.sum(axis=1)
    present = support > 0
    if not present.any():
        return 0.0
    recall = np.diag(counts)[present] / support[present]
    return float(recall.mean())


def classification_report(y_true: Any, y_pred: Any) -> dict[str, float]:
    return {"acc": accuracy(y_true, y_pred), "bal_acc": balanced_accuracy(y_true, y_pred)}


def inertia(records: Any, centroids: Any, assignments: Any) -> float:
    """Sum of squared distances of every sample to its assigned centroid."""
    x = as_records(records)
    c = as_records(centroids)
    a = as_targets(assignments).astype(np.int64)
    if a.shape[0] != x.shape[0]:
        raise ShapeMismatchError(f"records/assignments size mismatch: {x.shape[0]} vs {a.shape[0]}")
    if c.shape[1] != x.shape[1]:
        raise ShapeMismatchError(f"centroids have {c.shape[1]} features, records {x.shape[1]}")
    return float(np.sum((x - c[a]) ** 2))
