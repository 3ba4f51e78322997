from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class RunManifest:
    run_id: str
    run_dir_name: str
    created_at: str
    algorithm: str
    status: str
    artifacts_dir: str
    params: Dict[str, Any]
    dataset: Dict[str, Any]
    metrics: Dict[str, Any]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _slug(s: str) -> str:
    """Filesystem-safe short slug."""
    s = s.strip()
    s = re.sub(r"[^0-9A-Za-z]+", "_", s)
    s = re.sub(r"_+", "_", s).strip("_")
    return s or "run"


def _default_run_dir_name(*, run_id: str, algorithm: str, created_dt: datetime) -> str:
    # e.g. 20260124_163015_kmeans_2fef9e39 (UTC)
    ts = created_dt.strftime("%Y%m%d_%H%M%S")
    short = re.sub(r"[^0-9A-Za-z]", "", run_id)[:8] or run_id[:8]
    return f"{ts}_{_slug(algorithm)}_{short}"


def write_run_manifest(
    *,
    run_id: str,
    algorithm: str,
    status: str,
    artifacts_root: Path = Path("artifacts"),
    params: Optional[Dict[str, Any]] = None,
    dataset: Optional[Dict[str, Any]] = None,
    metrics: Optional[Dict[str, Any]] = None,
    write_latest: bool = True,
    run_dir_name: str | None = None,
) -> Path:
    """
    - run_id (UUID) identifies the run
    - the directory name is human readable (default: YYYYMMDD_HHMMSS_algorithm_shortid)
    - artifacts/runs/_latest.json points at the most recent manifest
    """
    created_dt = _utc_now()
    created_at = created_dt.isoformat()

    if run_dir_name is None:
        run_dir_name = _default_run_dir_name(
            run_id=run_id, algorithm=algorithm, created_dt=created_dt
        )

    run_dir = artifacts_root / "runs" / run_dir_name
    run_dir.mkdir(parents=True, exist_ok=True)

    manifest = RunManifest(
        run_id=run_id,
        run_dir_name=run_dir_name,
        created_at=created_at,
        algorithm=algorithm,
        status=status,
        artifacts_dir=run_dir.as_posix(),
        params=params or {},
        dataset=dataset or {},
        metrics=metrics or {},
    )

    manifest_path = run_dir / "manifest.json"
    manifest_path.write_text(
        json.dumps(asdict(manifest), ensure_ascii=False, indent=2, default=str),
        encoding="utf-8",
    )

    if write_latest:
        latest_path = artifacts_root / "runs" / "_latest.json"
        latest_path.write_text(
            json.dumps(
                {
                    "run_id": run_id,
                    "run_dir_name": run_dir_name,
                    "manifest_path": manifest_path.as_posix(),
                    "created_at": created_at,
                },
                ensure_ascii=False,
                indent=2,
            ),
            encoding="utf-8",
        )

    return manifest_path
