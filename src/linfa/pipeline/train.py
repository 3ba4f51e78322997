from __future__ import annotations

import argparse
import logging
import sys
import uuid
from pathlib import Path
from typing import Any

import numpy as np

from linfa.bayes import GaussianNbParams
from linfa.clustering import KMeans, KMeansParams
from linfa.common.config import get_settings
from linfa.common.logging import setup_json_logging
from linfa.datasets import DatasetSpec, load_dataset
from linfa.errors import LinfaError
from linfa.metrics import classification_report, inertia
from linfa.params import Params, RandomParams
from linfa.pipeline.manifest import write_run_manifest
from linfa.serde import load_params, require_joblib, save_model

logger = logging.getLogger(__name__)

ALGORITHMS: dict[str, type[Params]] = {
    "gaussian_nb": GaussianNbParams,
    "kmeans": KMeansParams,
}


def _evaluate(model: Any, test: Any) -> dict[str, float]:
    if isinstance(model, KMeans):
        assignments = model.predict(test.records)
        return {
            "inertia": inertia(test.records, model.centroids, assignments),
            "n_clusters": float(model.n_clusters),
        }
    predicted = model.predict(test)
    return classification_report(test.targets, predicted.targets)


def train_run(
    *,
    dataset: DatasetSpec,
    algorithm: str,
    params: Params | None = None,
    seed: int = 42,
    test_ratio: float = 0.2,
    save: bool = True,
) -> dict[str, Any]:
    if algorithm not in ALGORITHMS:
        known = ", ".join(sorted(ALGORITHMS))
        raise ValueError(f"unknown algorithm: {algorithm} (known: {known})")

    if save:
        # fail before fitting when the model could not be persisted
        require_joblib()

    s = get_settings()
    run_id = str(uuid.uuid4())

    params = params if params is not None else ALGORITHMS[algorithm]()
    if isinstance(params, RandomParams) and params.seed is None and params.rng is None:
        params = params.with_seed(seed)

    # 1) dataset load + shuffled split
    data = load_dataset(dataset)
    train, test = data.shuffle(np.random.default_rng(seed)).split_with_ratio(1.0 - test_ratio)
    logger.info(
        "train run %s: %s on %d train / %d test samples",
        run_id,
        algorithm,
        train.nsamples(),
        test.nsamples(),
    )

    # 2) fit + eval
    model = params.fit(train)
    metrics = _evaluate(model, test)

    # 3) model artifact
    artifacts_root = Path(s.artifacts_dir)
    model_path: Path | None = None
    if save:
        model_path = save_model(
            model, artifacts_root / "models" / f"{run_id}_{algorithm}.joblib", params=params
        )

    # 4) manifest
    manifest_path = write_run_manifest(
        run_id=run_id,
        algorithm=algorithm,
        status="success",
        artifacts_root=artifacts_root,
        params=params.to_dict(),
        dataset={
            "spec": dataset.to_dict(),
            "fingerprint": data.meta.get("fingerprint"),
            "shape": {"n_samples": data.nsamples(), "n_features": data.nfeatures()},
            "n_train": train.nsamples(),
            "n_test": test.nsamples(),
        },
        metrics=metrics,
    )

    return {
        "run_id": run_id,
        "model": model,
        "model_path": None if model_path is None else str(model_path),
        "manifest_path": str(manifest_path),
        "metrics": metrics,
    }


def _spec_from_args(args: argparse.Namespace) -> DatasetSpec:
    if args.dataset_spec:
        return DatasetSpec.from_json(args.dataset_spec)

    if args.blobs:
        return DatasetSpec(
            kind="blobs",
            name="blobs",
            params={"n_samples": args.blobs, "n_centers": 3, "seed": args.seed},
        )

    if not args.csv_path:
        raise ValueError("one of --dataset-spec, --blobs or --csv-path is required")

    return DatasetSpec(
        kind="csv",
        name=args.dataset_name,
        params={
            "path": args.csv_path,
            "target_col": args.target_col,
            "one_hot": (not args.no_one_hot),
            "dropna": (not args.no_dropna),
            "sep": args.sep,
        },
    )


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Fit a reference estimator and score it.")
    ap.add_argument("--algorithm", choices=sorted(ALGORITHMS), default="gaussian_nb")
    ap.add_argument("--params", type=str, default=None, help="hyperparameter JSON path")

    ap.add_argument("--dataset-spec", type=str, default=None, help="dataset spec JSON path")
    ap.add_argument("--dataset-name", type=str, default=None)
    ap.add_argument("--blobs", type=int, default=None, help="use N synthetic blob samples")

    ap.add_argument("--csv-path", type=str, default=None)
    ap.add_argument("--target-col", type=str, default=None)
    ap.add_argument("--sep", type=str, default=",")
    ap.add_argument("--no-one-hot", action="store_true")
    ap.add_argument("--no-dropna", action="store_true")

    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--test-ratio", type=float, default=0.2)
    ap.add_argument("--no-save", action="store_true")
    args = ap.parse_args(argv)

    s = get_settings()
    setup_json_logging(s.log_level)
    if args.seed is None:
        args.seed = s.default_seed

    try:
        spec = _spec_from_args(args)
        params = load_params(args.params, ALGORITHMS[args.algorithm]) if args.params else None
        out = train_run(
            dataset=spec,
            algorithm=args.algorithm,
            params=params,
            seed=args.seed,
            test_ratio=args.test_ratio,
            save=not args.no_save,
        )
    except (LinfaError, ValueError, FileNotFoundError, RuntimeError) as e:
        print(f"[ERR] {e}", file=sys.stderr)
        return 2

    print(f"[OK] run_id: {out['run_id']}")
    print(f"[OK] model: {out['model_path']}")
    print(f"[OK] manifest: {out['manifest_path']}")
    print(f"[OK] metrics: {out['metrics']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
