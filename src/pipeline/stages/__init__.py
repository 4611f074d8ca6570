"""
Pipeline stages for the ROI classifier.

- classify: per-frame enqueue/submit/fetch cycle over detected ROIs
"""

from .classify import (
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
