"""
Exportación de artefactos para la aplicación de predicción.

Cada entrenamiento genera un directorio versionado:

    artifacts/<YYYYMMDDTHHMMSSZ>/
        model.joblib
        encoding_spec.joblib
        category_metadata.json
        metrics.json
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import joblib
import structlog
from xgboost import XGBRegressor

from tasador.features import EncodingSpec
from tasador.models import CategoryMetadata
from tasador.training.trainer import TrainingResult

logger = structlog.get_logger()

MODEL_FILE = "model.joblib"
SPEC_FILE = "encoding_spec.joblib"
METADATA_FILE = "category_metadata.json"
METRICS_FILE = "metrics.json"


@dataclass
class ModelArtifacts:
    """Artefactos cargados desde disco."""

    model: XGBRegressor
    spec: EncodingSpec
    metadata: CategoryMetadata
    metrics: Dict[str, Any] = field(default_factory=dict)
    path: Optional[Path] = None


def new_version() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def export_artifacts(
    result: TrainingResult, root: Path, version: Optional[str] = None
) -> Path:
    """
    Guarda modelo, EncodingSpec, metadata y métricas.

    Args:
        result: Resultado del entrenamiento
        root: Directorio raíz de artefactos
        version: Nombre del directorio (default: timestamp UTC)

    Returns:
        Path del directorio creado
    """
    target = Path(root) / (version or new_version())
    target.mkdir(parents=True, exist_ok=False)

    joblib.dump(result.model, target / MODEL_FILE)
    joblib.dump(result.spec, target / SPEC_FILE)
    (target / METADATA_FILE).write_text(
        result.metadata.model_dump_json(indent=2), encoding="utf-8"
    )
    metrics = dict(result.metrics)
    metrics["feature_names"] = result.spec.feature_names
    (target / METRICS_FILE).write_text(json.dumps(metrics, indent=2), encoding="utf-8")

    logger.info("Artefactos exportados", path=str(target))
    return target


def load_artifacts(path: Path) -> ModelArtifacts:
    """Carga un directorio de artefactos exportado por export_artifacts."""
    path = Path(path)
    metrics_path = path / METRICS_FILE
    metrics = (
        json.loads(metrics_path.read_text(encoding="utf-8")) if metrics_path.exists() else {}
    )
    return ModelArtifacts(
        model=joblib.load(path / MODEL_FILE),
        spec=joblib.load(path / SPEC_FILE),
        metadata=CategoryMetadata.model_validate_json(
            (path / METADATA_FILE).read_text(encoding="utf-8")
        ),
        metrics=metrics,
        path=path,
    )
