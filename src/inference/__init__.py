"""
Inference layer: model descriptor and asynchronous batch backends.
"""

from .backend import InferenceBackend, PollResult, RequestHandle, RequestStatus
from .executor_backend import ExecutorBackend
from .model import EmotionDetectionModel

__all__ = [
    "InferenceBackend",
    "PollResult",
    "RequestHandle",
    "RequestStatus",
    "ExecutorBackend",
    "EmotionDetectionModel",
]
