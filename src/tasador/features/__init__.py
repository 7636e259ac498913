"""
Features del modelo: derivación y encoding categórico.
"""

from tasador.features.encoder import (
    CATEGORICAL_FIELDS,
    NUMERIC_FIELDS,
    TARGET,
    EncodingSpec,
    derive_features,
    locality_bucket,
    postal_prefix,
)

__all__ = [
    "CATEGORICAL_FIELDS",
    "NUMERIC_FIELDS",
    "TARGET",
    "EncodingSpec",
    "derive_features",
    "locality_bucket",
    "postal_prefix",
]
