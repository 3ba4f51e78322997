from __future__ import annotations

import json
import re
import sys
from pathlib import Path

import pandas as pd
import pytest

from linfa.bayes import GaussianNb
from linfa.clustering import KMeans, KMeansParams
from linfa.datasets import DatasetSpec
from linfa.pipeline.manifest import write_run_manifest
from linfa.pipeline.train import main, train_run
from linfa.serde import save_params


def _toy_csv(tmp_path: Path) -> Path:
    df = pd.DataFrame(
        {
            "f1": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 1.5, 5.5, 2.5, 4.5],
            "f2": [10.0, 9.0, 8.0, 7.0, 6.0, 5.0, 9.5, 5.5, 8.5, 6.5],
            "y": ["a", "a", "a", "b", "b", "b", "a", "b", "a", "b"],
        }
    )
    p = tmp_path / "toy.csv"
    df.to_csv(p, index=False)
    return p


def test_train_gaussian_nb_on_csv(tmp_path: Path) -> None:
    pytest.importorskip("joblib")
    p = _toy_csv(tmp_path)

    spec = DatasetSpec(kind="csv", params={"path": str(p), "target_col": "y", "one_hot": False})
    out = train_run(dataset=spec, algorithm="gaussian_nb", seed=42, test_ratio=0.3)

    assert isinstance(out["model"], GaussianNb)
    assert Path(out["model_path"]).exists()
    assert Path(out["manifest_path"]).exists()
    assert set(out["metrics"]) >= {"acc", "bal_acc"}

    manifest = json.loads(Path(out["manifest_path"]).read_text(encoding="utf-8"))
    assert manifest["run_id"] == out["run_id"]
    assert manifest["algorithm"] == "gaussian_nb"
    assert manifest["dataset"]["n_train"] == 7
    assert manifest["dataset"]["n_test"] == 3
    assert manifest["dataset"]["fingerprint"]["sha256"]
    assert manifest["params"] == {"var_smoothing": 1e-9}


def test_train_kmeans_on_blobs_without_saving(tmp_path: Path) -> None:
    spec = DatasetSpec(kind="blobs", params={"n_samples": 60, "seed": 1})

    out = train_run(
        dataset=spec,
        algorithm="kmeans",
        params=KMeansParams().with_n_runs(2),
        seed=42,
        save=False,
    )

    assert isinstance(out["model"], KMeans)
    assert out["model_path"] is None
    assert set(out["metrics"]) == {"inertia", "n_clusters"}

    manifest = json.loads(Path(out["manifest_path"]).read_text(encoding="utf-8"))
    # the run seed is filled in when the hyperparameters carry none
    assert manifest["params"]["seed"] == 42
    assert manifest["params"]["n_runs"] == 2


def test_train_run_unknown_algorithm() -> None:
    with pytest.raises(ValueError):
        train_run(dataset=DatasetSpec(kind="blobs"), algorithm="svm")


def test_manifest_dir_name_and_latest(tmp_path: Path) -> None:
    root = tmp_path / "artifacts"

    path = write_run_manifest(
        run_id="2fef9e39-aaaa-bbbb",
        algorithm="k means",
        status="success",
        artifacts_root=root,
        metrics={"inertia": 1.0},
    )

    assert re.match(r"^\d{8}_\d{6}_k_means_2fef9e39$", path.parent.name)
    latest = json.loads((root / "runs" / "_latest.json").read_text(encoding="utf-8"))
    assert latest["run_id"] == "2fef9e39-aaaa-bbbb"
    assert latest["manifest_path"] == path.as_posix()


def test_cli_main_blobs(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    params_path = save_params(KMeansParams().with_n_clusters(2), tmp_path / "kmeans.json")

    code = main(
        [
            "--algorithm",
            "kmeans",
            "--blobs",
            "40",
            "--params",
            str(params_path),
            "--no-save",
        ]
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "[OK] run_id:" in out
    assert "[OK] manifest:" in out

    runs = tmp_path / "artifacts" / "runs"
    dirs = [p for p in runs.iterdir() if p.is_dir()]
    assert len(dirs) == 1
    assert re.match(r"^\d{8}_\d{6}_kmeans_[0-9A-Za-z]{8}$", dirs[0].name)


def test_cli_main_csv(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pytest.importorskip("joblib")
    p = _toy_csv(tmp_path)

    code = main(["--csv-path", str(p), "--target-col", "y", "--no-one-hot"])

    assert code == 0
    assert "[OK] model:" in capsys.readouterr().out


def test_cli_main_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--csv-path", str(tmp_path / "missing.csv"), "--target-col", "y"])
    assert code == 2
    assert "[ERR]" in capsys.readouterr().err

    bad = save_params(KMeansParams().with_n_clusters(0), tmp_path / "bad.json")
    code = main(["--algorithm", "kmeans", "--blobs", "20", "--params", str(bad), "--no-save"])
    assert code == 2

    assert main([]) == 2


def test_cli_main_without_joblib(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setitem(sys.modules, "joblib", None)

    code = main(["--algorithm", "kmeans", "--blobs", "40"])

    assert code == 2
    assert "linfa[serde]" in capsys.readouterr().err
    # nothing was fitted, so no run was recorded
    assert not (tmp_path / "artifacts" / "runs").exists()

    assert main(["--algorithm", "kmeans", "--blobs", "40", "--no-save"]) == 0
