from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from linfa import Dataset
from linfa.bayes import GaussianNbParams
from linfa.clustering import KMeansParams
from linfa.serde import (
    load_model,
    load_params,
    params_from_json,
    params_to_json,
    save_model,
    save_params,
)


def test_params_json_round_trip(tmp_path: Path) -> None:
    p = KMeansParams().with_n_clusters(5).with_seed(7).with_init("random")

    path = save_params(p, tmp_path / "params" / "kmeans.json")
    obj = json.loads(path.read_text(encoding="utf-8"))

    assert obj["type"] == "KMeansParams"
    assert obj["params"]["n_clusters"] == 5
    assert "rng" not in obj["params"]
    assert load_params(path, KMeansParams) == p


def test_params_from_bare_object() -> None:
    p = params_from_json('{"var_smoothing": 0.01}', GaussianNbParams)
    assert p.var_smoothing == 0.01


def test_params_from_json_rejects_wrong_type() -> None:
    text = params_to_json(GaussianNbParams())
    with pytest.raises(ValueError):
        params_from_json(text, KMeansParams)
    with pytest.raises(ValueError):
        params_from_json("[1]", KMeansParams)
    with pytest.raises(TypeError):
        params_from_json('{"bogus": 1}', KMeansParams)


def test_model_round_trip(tmp_path: Path, two_class_xy) -> None:
    pytest.importorskip("joblib")
    x, y = two_class_xy
    params = GaussianNbParams()
    model = params.fit(Dataset(x, y))

    path = save_model(model, tmp_path / "models" / "nb.joblib", params=params)
    loaded = load_model(path)

    assert path.exists()
    assert np.array_equal(loaded.predict(x), model.predict(x))
    assert np.allclose(loaded.sigma, model.sigma)
