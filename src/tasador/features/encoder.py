"""
Feature engineering y encoding categórico.

Este módulo se usa tanto en el entrenamiento como en la inferencia:
el EncodingSpec se ajusta UNA vez sobre el dataset de entrenamiento y
se reutiliza tal cual para construir cualquier matriz posterior.
Re-ajustarlo en inferencia desalinearía las columnas del modelo.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

import numpy as np
import pandas as pd

from tasador.config import OTHER_LOCALITY, TARGET_LOCALITIES

CATEGORICAL_FIELDS = ("listing_type", "locality_bucket", "postal_prefix")
NUMERIC_FIELDS = ("n_beds", "n_baths", "latitude", "longitude")
TARGET = "price"


def postal_prefix(postal_code: Any) -> Optional[str]:
    """Primeros 3 caracteres del código postal (la FSA canadiense)."""
    if not isinstance(postal_code, str):
        return None
    code = postal_code.strip().upper()
    return code[:3] if code else None


def locality_bucket(locality: Any) -> str:
    """Ciudades conocidas pasan tal cual; el resto (y faltantes) es 'Other'."""
    if isinstance(locality, str) and locality in TARGET_LOCALITIES:
        return locality
    return OTHER_LOCALITY


def _category_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def derive_features(df: pd.DataFrame) -> pd.DataFrame:
    """
    Deriva las columnas que usa el modelo.

    - postal_prefix desde postal_code
    - locality_bucket desde locality
    - numéricos coercionados (texto inválido -> NaN)

    Si el DataFrame ya trae postal_prefix/locality_bucket (inputs de
    inferencia) y no la columna original, se respetan.

    Args:
        df: Dataset enriquecido (o inputs de inferencia)

    Returns:
        Copia del DataFrame con las columnas derivadas
    """
    df = df.copy()

    for col in NUMERIC_FIELDS + (TARGET,):
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
        else:
            df[col] = np.nan

    if "postal_code" in df.columns:
        df["postal_prefix"] = df["postal_code"].map(postal_prefix)
    elif "postal_prefix" in df.columns:
        df["postal_prefix"] = df["postal_prefix"].map(postal_prefix)
    else:
        df["postal_prefix"] = None

    if "locality" in df.columns:
        df["locality_bucket"] = df["locality"].map(locality_bucket)
    elif "locality_bucket" in df.columns:
        df["locality_bucket"] = df["locality_bucket"].map(locality_bucket)
    else:
        df["locality_bucket"] = OTHER_LOCALITY

    if "listing_type" in df.columns:
        df["listing_type"] = df["listing_type"].map(_category_value)
    else:
        df["listing_type"] = None

    return df


@dataclass(frozen=True)
class EncodingSpec:
    """
    Receta de encoding ajustada sobre el dataset de entrenamiento.

    levels: pares (campo categórico, niveles observados), en el orden de las columnas
    numeric_fields: campos numéricos que pasan sin transformar

    Todo se guarda como tuplas: la receta es inmutable y hasheable.
    """

    levels: Tuple[Tuple[str, Tuple[str, ...]], ...] = ()
    numeric_fields: Tuple[str, ...] = NUMERIC_FIELDS

    def __post_init__(self):
        levels = self.levels.items() if isinstance(self.levels, dict) else self.levels
        object.__setattr__(
            self, "levels", tuple((col, tuple(col_levels)) for col, col_levels in levels)
        )
        object.__setattr__(self, "numeric_fields", tuple(self.numeric_fields))

    def levels_for(self, col: str) -> Tuple[str, ...]:
        """Niveles registrados para un campo categórico."""
        for name, col_levels in self.levels:
            if name == col:
                return col_levels
        raise KeyError(col)

    @classmethod
    def fit(
        cls,
        df: pd.DataFrame,
        categorical_fields: Tuple[str, ...] = CATEGORICAL_FIELDS,
        numeric_fields: Tuple[str, ...] = NUMERIC_FIELDS,
    ) -> "EncodingSpec":
        """Registra los niveles distintos (ordenados) de cada campo categórico."""
        features = derive_features(df)
        levels = {}
        for col in categorical_fields:
            values = features[col].dropna().astype(str)
            levels[col] = tuple(sorted(values.unique()))
        return cls(levels=levels, numeric_fields=tuple(numeric_fields))

    @property
    def feature_names(self) -> List[str]:
        names = list(self.numeric_fields)
        for col, col_levels in self.levels:
            names.extend(f"{col}={level}" for level in col_levels)
        return names

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Construye la matriz numérica con columnas fijas.

        Niveles no vistos en el fit (o faltantes) quedan con todas sus
        indicadoras en cero. El orden de columnas es siempre feature_names,
        sin importar el contenido de df.
        """
        features = derive_features(df)
        blocks = [features[list(self.numeric_fields)].astype("float64")]

        for col, col_levels in self.levels:
            if not col_levels:
                continue
            values = features[col].where(features[col].isna(), features[col].astype(str))
            # code -1 = faltante o nivel no visto en el fit
            codes = pd.Categorical(values, categories=list(col_levels)).codes
            indicators = np.zeros((len(codes), len(col_levels)), dtype="float64")
            rows = np.flatnonzero(codes >= 0)
            indicators[rows, codes[rows]] = 1.0
            blocks.append(
                pd.DataFrame(
                    indicators,
                    index=features.index,
                    columns=[f"{col}={level}" for level in col_levels],
                )
            )

        matrix = pd.concat(blocks, axis=1)
        return matrix.reindex(columns=self.feature_names, fill_value=0.0)
