"""
Metadata de categorías y rangos para la aplicación de predicción.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class NumericRange(BaseModel):
    """Rango observado de un campo numérico."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float


class CategoryMetadata(BaseModel):
    """
    Snapshot de valores distintos y rangos numéricos del dataset de entrenamiento.

    La consume la UI para armar formularios y validar entradas.
    """

    model_config = ConfigDict(frozen=True)

    categories: dict[str, list[str]] = Field(
        default_factory=dict, description="Valores distintos por campo categórico"
    )
    numeric_ranges: dict[str, NumericRange] = Field(
        default_factory=dict, description="(min, max) por campo numérico"
    )
    n_rows: int = Field(0, ge=0, description="Filas usadas para entrenar")
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Timestamp ISO de creación",
    )
