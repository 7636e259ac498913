"""
Entrenamiento del modelo de precios.

El regresor (XGBoost) se trata como caja negra: recibe la matriz
encodeada y el vector de precios. Lo importante de este módulo es que
el EncodingSpec se ajusta una sola vez y es el mismo que se exporta.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
import structlog
from pydantic import BaseModel, Field
from sklearn.metrics import mean_absolute_error, mean_absolute_percentage_error, r2_score
from sklearn.model_selection import train_test_split
from xgboost import XGBRegressor

from tasador.config import Settings, get_settings
from tasador.features import (
    CATEGORICAL_FIELDS,
    NUMERIC_FIELDS,
    TARGET,
    EncodingSpec,
    derive_features,
)
from tasador.models import CategoryMetadata, NumericRange

logger = structlog.get_logger()

# Por debajo de esto no tiene sentido separar un hold-out
MIN_ROWS_FOR_EVALUATION = 20


class TrainerConfig(BaseModel):
    """Hiperparámetros del gradient boosting."""

    max_depth: int = Field(6, ge=1)
    learning_rate: float = Field(0.05, gt=0)
    n_estimators: int = Field(600, ge=1)
    subsample: float = Field(0.8, gt=0, le=1)
    colsample_bytree: float = Field(0.8, gt=0, le=1)
    test_size: float = Field(0.2, gt=0, lt=1)
    random_state: int = 42

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "TrainerConfig":
        settings = settings or get_settings()
        return cls(
            max_depth=settings.model_max_depth,
            learning_rate=settings.model_learning_rate,
            n_estimators=settings.model_n_estimators,
            subsample=settings.model_subsample,
            colsample_bytree=settings.model_colsample_bytree,
            test_size=settings.model_test_size,
            random_state=settings.model_random_state,
        )


@dataclass
class TrainingResult:
    """Modelo entrenado y todo lo necesario para reutilizarlo."""

    model: XGBRegressor
    spec: EncodingSpec
    metadata: CategoryMetadata
    metrics: Dict[str, Any] = field(default_factory=dict)


def prepare_training_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Deriva features y descarta filas sin precio.

    Args:
        df: Dataset enriquecido

    Returns:
        DataFrame listo para ajustar el encoding y entrenar
    """
    features = derive_features(df)
    original_count = len(features)
    features = features[features[TARGET].notna() & (features[TARGET] > 0)]
    features = features.reset_index(drop=True)
    logger.info(
        "Filas para entrenamiento",
        kept=len(features),
        dropped_without_price=original_count - len(features),
    )
    return features


def build_category_metadata(df: pd.DataFrame) -> CategoryMetadata:
    """Valores distintos por categoría y rangos numéricos (incluye el precio)."""
    features = derive_features(df)

    categories = {}
    for col in CATEGORICAL_FIELDS:
        categories[col] = sorted(features[col].dropna().astype(str).unique().tolist())
    if "locality" in features.columns:
        categories["locality"] = sorted(features["locality"].dropna().astype(str).unique().tolist())

    numeric_ranges = {}
    for col in NUMERIC_FIELDS + (TARGET,):
        values = features[col].dropna()
        if values.empty:
            continue
        numeric_ranges[col] = NumericRange(min=float(values.min()), max=float(values.max()))

    return CategoryMetadata(
        categories=categories,
        numeric_ranges=numeric_ranges,
        n_rows=len(features),
    )


def _build_regressor(config: TrainerConfig) -> XGBRegressor:
    return XGBRegressor(
        objective="reg:squarederror",
        max_depth=config.max_depth,
        learning_rate=config.learning_rate,
        n_estimators=config.n_estimators,
        subsample=config.subsample,
        colsample_bytree=config.colsample_bytree,
        random_state=config.random_state,
        n_jobs=-1,
    )


def evaluate(model: XGBRegressor, X: pd.DataFrame, y: pd.Series) -> Dict[str, float]:
    predictions = model.predict(X)
    metrics = {
        "mae": float(mean_absolute_error(y, predictions)),
        "mape": float(mean_absolute_percentage_error(y, predictions)),
    }
    if len(y) > 1:
        metrics["r2"] = float(r2_score(y, predictions))
    return metrics


def train_model(df: pd.DataFrame, config: Optional[TrainerConfig] = None) -> TrainingResult:
    """
    Entrena el modelo de precios.

    1. Ajusta el EncodingSpec sobre todas las filas con precio
    2. Evalúa sobre un hold-out aleatorio (si hay filas suficientes)
    3. Re-entrena sobre todas las filas con el mismo EncodingSpec

    Args:
        df: Dataset enriquecido
        config: Hiperparámetros (default: los de settings)

    Returns:
        TrainingResult con modelo, EncodingSpec, metadata y métricas
    """
    config = config or TrainerConfig.from_settings()
    frame = prepare_training_frame(df)
    if frame.empty:
        raise ValueError("No hay filas con precio para entrenar el modelo")

    spec = EncodingSpec.fit(frame)
    X = spec.transform(frame)
    y = frame[TARGET].astype("float64")

    logger.info(
        "Matriz de entrenamiento construida",
        rows=X.shape[0],
        features=X.shape[1],
    )

    metrics: Dict[str, Any] = {"n_rows": int(len(frame)), "n_features": int(X.shape[1])}

    if len(frame) >= MIN_ROWS_FOR_EVALUATION:
        X_train, X_test, y_train, y_test = train_test_split(
            X, y, test_size=config.test_size, random_state=config.random_state
        )
        holdout_model = _build_regressor(config)
        holdout_model.fit(X_train, y_train)
        metrics.update(evaluate(holdout_model, X_test, y_test))
        logger.info("Métricas de hold-out", **metrics)
    else:
        logger.warning(
            "Muy pocas filas para evaluar, se entrena sin hold-out",
            rows=len(frame),
        )

    model = _build_regressor(config)
    model.fit(X, y)

    return TrainingResult(
        model=model,
        spec=spec,
        metadata=build_category_metadata(frame),
        metrics=metrics,
    )


def predict_prices(model: XGBRegressor, spec: EncodingSpec, df: pd.DataFrame) -> np.ndarray:
    """Predice precios para nuevos inputs usando el EncodingSpec del entrenamiento."""
    return model.predict(spec.transform(df))
