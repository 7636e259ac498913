"""
Entrenamiento del modelo y exportación de artefactos.
"""

from tasador.training.trainer import (
    TrainerConfig,
    TrainingResult,
    build_category_metadata,
    predict_prices,
    prepare_training_frame,
    train_model,
)
from tasador.training.artifacts import ModelArtifacts, export_artifacts, load_artifacts

__all__ = [
    "TrainerConfig",
    "TrainingResult",
    "build_category_metadata",
    "predict_prices",
    "prepare_training_frame",
    "train_model",
    "ModelArtifacts",
    "export_artifacts",
    "load_artifacts",
]
