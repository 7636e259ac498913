import json

import numpy as np
import pandas as pd
import pytest

from tasador.training import (
    TrainerConfig,
    build_category_metadata,
    export_artifacts,
    load_artifacts,
    predict_prices,
    train_model,
)

LOCALITIES = ["Toronto", "Mississauga", "Vaughan", "Scarborough"]
TYPES = ["condo", "detached", "townhome", "condo_townhome"]


@pytest.fixture
def enriched_df():
    rng = np.random.default_rng(0)
    n = 60
    beds = rng.integers(1, 5, size=n)
    baths = rng.integers(1, 4, size=n)
    df = pd.DataFrame(
        {
            "address": [f"{i} Main St" for i in range(n)],
            "listing_type": [TYPES[i % 4] for i in range(n)],
            "n_beds": beds,
            "n_baths": baths,
            "price": 300000 + beds * 150000 + baths * 50000 + rng.integers(0, 20000, size=n),
            "locality": [LOCALITIES[i % 4] for i in range(n)],
            "postal_code": [f"M{i % 6}V 1A1" for i in range(n)],
            "latitude": rng.uniform(43.5, 43.9, size=n),
            "longitude": rng.uniform(-79.7, -79.2, size=n),
        }
    )
    # Algunas filas sin precio no entran al entrenamiento
    df.loc[[0, 1], "price"] = np.nan
    return df


@pytest.fixture
def config():
    return TrainerConfig(n_estimators=20, max_depth=3, learning_rate=0.3)


def test_train_model(enriched_df, config):
    result = train_model(enriched_df, config)

    assert result.metrics["n_rows"] == 58
    assert result.metrics["n_features"] == len(result.spec.feature_names)
    assert {"mae", "mape", "r2"} <= set(result.metrics)
    predictions = predict_prices(result.model, result.spec, enriched_df.head(5))
    assert predictions.shape == (5,)
    assert np.all(np.isfinite(predictions))


def test_training_without_prices_fails(enriched_df, config):
    with pytest.raises(ValueError):
        train_model(enriched_df.assign(price=np.nan), config)


def test_small_datasets_train_without_holdout(enriched_df, config):
    result = train_model(enriched_df.iloc[2:8], config)
    assert "mae" not in result.metrics
    assert result.metrics["n_rows"] == 6


def test_prediction_handles_unseen_categories(enriched_df, config):
    result = train_model(enriched_df, config)
    new = pd.DataFrame(
        {
            "listing_type": ["loft"],
            "n_beds": [2],
            "n_baths": [1],
            "locality": ["Kingston"],
            "postal_code": ["K7L 3N6"],
            "latitude": [44.23],
            "longitude": [-76.48],
        }
    )
    assert predict_prices(result.model, result.spec, new).shape == (1,)


def test_category_metadata(enriched_df):
    metadata = build_category_metadata(enriched_df)

    assert metadata.categories["listing_type"] == sorted(TYPES)
    assert metadata.categories["locality_bucket"] == ["Mississauga", "Other", "Toronto", "Vaughan"]
    assert "Scarborough" in metadata.categories["locality"]
    assert metadata.numeric_ranges["n_beds"].min >= 1
    assert metadata.numeric_ranges["price"].max == enriched_df["price"].max()
    assert metadata.n_rows == len(enriched_df)


def test_export_and_load_artifacts(tmp_path, enriched_df, config):
    result = train_model(enriched_df, config)

    path = export_artifacts(result, tmp_path / "artifacts", version="v1")
    loaded = load_artifacts(path)

    assert path.name == "v1"
    assert loaded.spec == result.spec
    assert loaded.spec.feature_names == result.spec.feature_names
    assert loaded.metadata == result.metadata
    np.testing.assert_allclose(
        predict_prices(loaded.model, loaded.spec, enriched_df),
        predict_prices(result.model, result.spec, enriched_df),
    )
    metrics = json.loads((path / "metrics.json").read_text(encoding="utf-8"))
    assert metrics["feature_names"] == result.spec.feature_names


def test_export_never_overwrites_a_version(tmp_path, enriched_df, config):
    result = train_model(enriched_df.iloc[2:8], config)
    export_artifacts(result, tmp_path, version="v1")
    with pytest.raises(FileExistsError):
        export_artifacts(result, tmp_path, version="v1")
