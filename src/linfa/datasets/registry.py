from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Callable

from linfa.datasets.dataset import Dataset

logger = logging.getLogger(__name__)


def _kind(value: str) -> str:
    k = str(value or "").strip().lower()
    if not k:
        raise ValueError("dataset kind is required")
    return k


@dataclass(frozen=True)
class DatasetSpec:
    """Where a Dataset comes from, independent of the loader behind it.

    `kind` picks the loader (csv, blobs, ...), `params` are passed to it
    untouched. `name` and `note` only end up in the dataset meta and run
    manifests.
    """

    kind: str
    name: str | None = None
    params: dict[str, Any] = field(default_factory=dict)
    split: dict[str, Any] = field(default_factory=dict)
    note: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or _kind(self.kind)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "DatasetSpec":
        unknown = sorted(set(d) - {"kind", "name", "params", "split", "note"})
        if unknown:
            raise ValueError(f"unexpected dataset spec keys: {unknown}")
        return cls(
            kind=str(d.get("kind") or ""),
            name=d.get("name"),
            params=dict(d.get("params") or {}),
            split=dict(d.get("split") or {}),
            note=d.get("note"),
        )

    @classmethod
    def from_json(cls, path: str | Path) -> "DatasetSpec":
        obj = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(obj, dict):
            raise ValueError(f"{path}: dataset spec JSON must be an object")
        return cls.from_dict(obj)


DatasetLoader = Callable[[DatasetSpec], Dataset]

_LOADERS: dict[str, DatasetLoader] = {}


def register_loader(kind: str, loader: DatasetLoader, *, overwrite: bool = False) -> None:
    """Make `loader` available to `load_dataset` under `kind` (case-insensitive)."""
    k = _kind(kind)
    if k in _LOADERS and not overwrite:
        raise ValueError(f"loader already registered: {k}")
    _LOADERS[k] = loader


def list_loaders() -> list[str]:
    return sorted(_LOADERS)


def load_dataset(spec: DatasetSpec) -> Dataset:
    """Run the loader registered for `spec.kind`.

    The returned dataset always carries dataset_kind, dataset_name and
    dataset_spec in its meta; values the loader set itself win.
    """
    k = _kind(spec.kind)
    loader = _LOADERS.get(k)
    if loader is None:
        raise ValueError(f"unknown dataset kind: {k} (known: {', '.join(list_loaders()) or '-'})")

    dataset = loader(spec)
    logger.debug("loaded %s dataset %r: %s", k, spec.display_name, dataset.records.shape)

    common = {"dataset_kind": k, "dataset_name": spec.display_name, "dataset_spec": spec.to_dict()}
    return replace(dataset, meta={**common, **dataset.meta})
