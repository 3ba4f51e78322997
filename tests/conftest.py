from __future__ import annotations

import logging
import sys
from pathlib import Path

import numpy as np
import pytest

# put repo root / src on the pytest import path
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

root_str = str(ROOT)
src_str = str(SRC)

if root_str not in sys.path:
    sys.path.insert(0, root_str)

if src_str not in sys.path:
    sys.path.insert(0, src_str)

from linfa.common.logging import JsonFormatter  # noqa: E402


@pytest.fixture(autouse=True)
def _linfa_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for k in ("LINFA_DTYPE", "LINFA_SEED", "LINFA_LOG_LEVEL"):
        monkeypatch.delenv(k, raising=False)
    monkeypatch.setenv("LINFA_ARTIFACTS", str(tmp_path / "artifacts"))


@pytest.fixture(autouse=True)
def _drop_json_handlers():
    # the CLI installs a JSON handler on the root logger; remove it after every test
    root = logging.getLogger()
    level = root.level
    yield
    for h in list(root.handlers):
        if isinstance(h.formatter, JsonFormatter):
            root.removeHandler(h)
    root.setLevel(level)


@pytest.fixture()
def two_class_xy() -> tuple[np.ndarray, np.ndarray]:
    x = np.array(
        [
            [-2.0, -1.0],
            [-1.0, -1.0],
            [-1.0, -2.0],
            [1.0, 1.0],
            [1.0, 2.0],
            [2.0, 1.0],
        ]
    )
    y = np.array([1, 1, 1, 2, 2, 2])
    return x, y
