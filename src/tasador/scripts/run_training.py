"""
Script para entrenar el modelo de precios y exportar los artefactos.

Uso:
    python -m tasador.scripts.run_training
    python -m tasador.scripts.run_training --input data/enriched_listings.csv
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

import structlog

from tasador.config import Settings, get_settings
from tasador.logging_config import configure_logging
from tasador.storage import load_frame
from tasador.training import TrainerConfig, export_artifacts, train_model

logger = structlog.get_logger()


def run_training(
    input_path: Optional[Path] = None,
    artifacts_dir: Optional[Path] = None,
    settings: Optional[Settings] = None,
) -> Path:
    """
    Entrena sobre el dataset enriquecido y exporta los artefactos.

    Returns:
        Directorio versionado con los artefactos
    """
    settings = settings or get_settings()
    input_path = input_path or settings.enriched_path
    artifacts_dir = artifacts_dir or settings.artifacts_dir

    df = load_frame(input_path)
    logger.info("Dataset enriquecido cargado", path=str(input_path), rows=len(df))

    result = train_model(df, TrainerConfig.from_settings(settings))
    return export_artifacts(result, artifacts_dir)


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Entrena el modelo de precios")
    parser.add_argument("--input", type=Path, default=None, help="CSV enriquecido")
    parser.add_argument(
        "--artifacts-dir", type=Path, default=None, help="Directorio raíz de artefactos"
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        path = run_training(args.input, args.artifacts_dir, settings=settings)
        logger.info("Entrenamiento completado", artifacts=str(path))
        sys.exit(0)
    except KeyboardInterrupt:
        logger.info("Entrenamiento interrumpido por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en entrenamiento", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
