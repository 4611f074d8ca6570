"""
ROI Classifier - Detection Module

This module classifies face ROIs of video frames in batched inference requests.
"""

from .base import BaseInference, InferenceState
from .emotions import EmotionsDetection, create_emotions_detection_from_config
from .roi_filter import FilterSyntaxError, RoiFilter, filter_rois, is_valid_filter_conditions

__all__ = [
    'BaseInference',
    'InferenceState',
    'EmotionsDetection',
    'create_emotions_detection_from_config',
    'FilterSyntaxError',
    'RoiFilter',
    'filter_rois',
    'is_valid_filter_conditions',
]
