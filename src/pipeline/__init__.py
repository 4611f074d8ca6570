"""
Pipeline module for the ROI classifier.

Stages consume frames with ROIs found by an upstream detector and run the
classification cycle for each frame.
"""

from .stages.classify import (
    ClassifyStage,
    ClassifyStageConfig,
    create_classify_stage,
    create_classify_stage_from_config,
)

__all__ = [
    "ClassifyStage",
    "ClassifyStageConfig",
    "create_classify_stage",
    "create_classify_stage_from_config",
]
