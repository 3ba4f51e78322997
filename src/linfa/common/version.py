from __future__ import annotations

import platform
import sys
from importlib import metadata

import numpy as np

from linfa.common.config import get_settings


def _safe_pkg_version(name: str) -> str | None:
    try:
        return metadata.version(name)
    except metadata.PackageNotFoundError:
        return None


def get_build_info() -> dict[str, object]:
    """Build/runtime identification.

    - which linfa and numpy the process runs against
    - the numeric defaults in effect (dtype, seed)
    """
    s = get_settings()

    return {
        "package": {"name": "linfa", "version": _safe_pkg_version("linfa")},
        "numpy": {"version": np.__version__},
        "defaults": {"dtype": s.dtype, "seed": s.default_seed},
        "python": {"version": sys.version.split()[0]},
        "platform": {
            "system": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
        },
    }
