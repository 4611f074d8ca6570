"""
Typed models for the ROI classifier.

Geometry, results, frames and configuration shared by the inference,
detection and pipeline layers.
"""

from .frame import FrameData
from .detection import BoundingBox, Detection, rois_from_detections
from .result import Result, EmotionsResult, UNSET_CONFIDENCE
from .config import Config, ModelConfig, InferenceConfig, DEFAULT_EMOTION_LABELS

__all__ = [
    # Frame
    "FrameData",
    # Geometry
    "BoundingBox",
    "Detection",
    "rois_from_detections",
    # Results
    "Result",
    "EmotionsResult",
    "UNSET_CONFIDENCE",
    # Config
    "Config",
    "ModelConfig",
    "InferenceConfig",
    "DEFAULT_EMOTION_LABELS",
]
