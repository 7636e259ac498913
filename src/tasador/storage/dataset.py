"""
Persistencia de datasets en CSV.

Cada etapa (listings crudos, normalizados, enriquecidos) se guarda como
un único archivo tabular. La escritura pasa por un archivo temporal para
que una interrupción no deje un CSV a medias.
"""

from pathlib import Path
from typing import Iterable, Type, TypeVar

import pandas as pd
import structlog
from pydantic import BaseModel

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)

INT_COLUMNS = ("n_beds", "n_baths", "price")
RAW_TEXT_COLUMNS = ("n_beds_text", "n_baths_text", "price_text")
STRING_COLUMNS = (
    "address",
    "n_beds_text",
    "n_baths_text",
    "price_text",
    "listing_type",
    "formatted_address",
    "street_number",
    "route",
    "locality",
    "postal_code",
)


def listings_to_frame(listings: Iterable[BaseModel]) -> pd.DataFrame:
    """Convierte modelos a DataFrame (enums como string, enteros nullable)."""
    df = pd.DataFrame([listing.model_dump(mode="json") for listing in listings])
    for col in INT_COLUMNS:
        if col in df.columns:
            df[col] = df[col].astype("Int64")
    return df


def save_frame(df: pd.DataFrame, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    df.to_csv(tmp_path, index=False)
    tmp_path.replace(path)
    logger.info("Dataset guardado", path=str(path), rows=len(df))
    return path


def save_listings(listings: Iterable[BaseModel], path: Path) -> Path:
    return save_frame(listings_to_frame(listings), path)


def load_frame(path: Path) -> pd.DataFrame:
    """
    Lee un dataset conservando los campos de texto como texto.

    Solo la celda vacía es faltante: "N/A" o "NA" son texto scrapeado.
    En los campos de texto crudo la celda vacía es el string vacío.
    """
    try:
        header = pd.read_csv(path, nrows=0).columns
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    dtypes = {col: str for col in STRING_COLUMNS if col in header}
    na_values = {col: [""] for col in header if col not in RAW_TEXT_COLUMNS}
    return pd.read_csv(path, dtype=dtypes, keep_default_na=False, na_values=na_values)


def load_listings(path: Path, model: Type[T]) -> list[T]:
    """
    Reconstruye modelos desde un CSV.

    Args:
        path: Archivo CSV
        model: Clase del modelo (RawListing, NormalizedListing, EnrichedListing)

    Returns:
        Lista de instancias del modelo
    """
    df = load_frame(path)
    df = df.astype(object).where(df.notna(), None)
    listings = [model.model_validate(row) for row in df.to_dict(orient="records")]
    logger.info("Dataset cargado", path=str(path), rows=len(listings))
    return listings
