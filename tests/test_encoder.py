import dataclasses

import numpy as np
import pandas as pd
import pytest

from tasador.config import TARGET_LOCALITIES
from tasador.features import EncodingSpec, derive_features, locality_bucket, postal_prefix
from tasador.models import ListingType


@pytest.fixture
def train_df():
    return pd.DataFrame(
        {
            "listing_type": ["condo", "detached", "condo", "townhome"],
            "n_beds": [1, 4, 2, 3],
            "n_baths": [1, 3, 2, 2],
            "price": [500000, 1500000, 650000, 900000],
            "locality": ["Toronto", "Mississauga", "Scarborough", None],
            "postal_code": ["M5V 2T6", "L5B 1M2", "m1b 3c4", None],
            "latitude": [43.64, 43.59, 43.80, 43.70],
            "longitude": [-79.39, -79.64, -79.20, -79.40],
        }
    )


@pytest.mark.parametrize("city", TARGET_LOCALITIES)
def test_listed_cities_pass_through(city):
    assert locality_bucket(city) == city


@pytest.mark.parametrize("value", ["Scarborough", "toronto", "Ottawa", "", None, np.nan])
def test_other_localities_map_to_other(value):
    assert locality_bucket(value) == "Other"


@pytest.mark.parametrize(
    "code, expected",
    [("M5V 2T6", "M5V"), ("m1b3c4", "M1B"), (" L5B 1M2", "L5B"), ("", None), (None, None)],
)
def test_postal_prefix(code, expected):
    assert postal_prefix(code) == expected


def test_derive_features(train_df):
    features = derive_features(train_df)

    assert features["postal_prefix"].tolist()[:3] == ["M5V", "L5B", "M1B"]
    assert pd.isna(features["postal_prefix"].iloc[3])
    assert features["locality_bucket"].tolist() == ["Toronto", "Mississauga", "Other", "Other"]
    # No modifica el input
    assert "postal_prefix" not in train_df.columns


def test_derive_features_accepts_enum_listing_type_and_bad_numbers():
    df = pd.DataFrame(
        {"listing_type": [ListingType.CONDO], "n_beds": ["three"], "locality": ["Toronto"]}
    )
    features = derive_features(df)
    assert features["listing_type"].iloc[0] == "condo"
    assert np.isnan(features["n_beds"].iloc[0])


def test_fit_records_sorted_levels(train_df):
    spec = EncodingSpec.fit(train_df)

    assert spec.levels_for("listing_type") == ("condo", "detached", "townhome")
    assert spec.levels_for("locality_bucket") == ("Mississauga", "Other", "Toronto")
    assert spec.levels_for("postal_prefix") == ("L5B", "M1B", "M5V")
    assert spec.feature_names[:4] == ["n_beds", "n_baths", "latitude", "longitude"]
    assert "listing_type=condo" in spec.feature_names


def test_transform_builds_indicator_matrix(train_df):
    spec = EncodingSpec.fit(train_df)

    matrix = spec.transform(train_df)

    assert list(matrix.columns) == spec.feature_names
    assert matrix.shape == (4, len(spec.feature_names))
    assert all(dtype == np.float64 for dtype in matrix.dtypes)
    first = matrix.iloc[0]
    assert first["listing_type=condo"] == 1.0
    assert first["listing_type=detached"] == 0.0
    assert first["locality_bucket=Toronto"] == 1.0
    assert first["postal_prefix=M5V"] == 1.0
    assert first["n_beds"] == 1.0
    # Código postal faltante -> todas las indicadoras en cero
    last = matrix.iloc[3]
    assert last[[c for c in matrix.columns if c.startswith("postal_prefix=")]].sum() == 0.0


def test_unseen_levels_map_to_zero_columns(train_df):
    spec = EncodingSpec.fit(train_df)
    new = pd.DataFrame(
        {
            "listing_type": ["condo_townhome"],
            "n_beds": [2],
            "n_baths": [2],
            "locality": ["Ottawa"],
            "postal_code": ["K1A 0B1"],
            "latitude": [45.42],
            "longitude": [-75.69],
        }
    )

    matrix = spec.transform(new)

    assert list(matrix.columns) == spec.feature_names
    row = matrix.iloc[0]
    assert row[[c for c in matrix.columns if c.startswith("listing_type=")]].sum() == 0.0
    assert row[[c for c in matrix.columns if c.startswith("postal_prefix=")]].sum() == 0.0
    # Ottawa no está en la lista -> Other, que sí se vio en el fit
    assert row["locality_bucket=Other"] == 1.0


def test_column_order_does_not_depend_on_input(train_df):
    spec = EncodingSpec.fit(train_df)
    reordered = train_df.iloc[::-1][list(reversed(train_df.columns))]
    subset = train_df[train_df["listing_type"] == "detached"]

    assert list(spec.transform(reordered).columns) == spec.feature_names
    assert list(spec.transform(subset).columns) == spec.feature_names
    assert list(spec.transform(train_df.iloc[0:0]).columns) == spec.feature_names


def test_transform_is_idempotent(train_df):
    spec = EncodingSpec.fit(train_df)
    new = train_df.assign(locality=["Vaughan", None, "Barrie", "Kingston"])

    first = spec.transform(new)
    second = spec.transform(new)

    pd.testing.assert_frame_equal(first, second)
    assert first.to_numpy().tobytes() == second.to_numpy().tobytes()


def test_transform_accepts_already_derived_inputs(train_df):
    spec = EncodingSpec.fit(train_df)
    inference = pd.DataFrame(
        {
            "listing_type": ["condo"],
            "n_beds": [1],
            "n_baths": [1],
            "locality_bucket": ["Toronto"],
            "postal_prefix": ["M5V"],
            "latitude": [43.64],
            "longitude": [-79.39],
        }
    )

    expected = spec.transform(train_df.iloc[[0]]).reset_index(drop=True)
    pd.testing.assert_frame_equal(spec.transform(inference), expected)


def test_fitted_spec_is_immutable_and_hashable(train_df):
    spec = EncodingSpec.fit(train_df)

    assert isinstance(spec.levels, tuple)
    assert hash(spec) == hash(EncodingSpec.fit(train_df))
    with pytest.raises(dataclasses.FrozenInstanceError):
        spec.levels = ()
    with pytest.raises(KeyError):
        spec.levels_for("route")


def test_spec_accepts_levels_as_mapping():
    spec = EncodingSpec(levels={"listing_type": ["condo", "detached"]}, numeric_fields=["n_beds"])

    assert spec.levels == (("listing_type", ("condo", "detached")),)
    assert spec.feature_names == ["n_beds", "listing_type=condo", "listing_type=detached"]
