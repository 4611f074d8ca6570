"""
Emotion detection model descriptor.

The descriptor only carries metadata needed to prepare inputs and to
interpret the raw output tensor. Loading the network weights is the
backend's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from models.config import ModelConfig


@dataclass(frozen=True)
class EmotionDetectionModel:
    """
    Immutable description of a loaded emotion classification network.

    Attributes:
        model_name: Identifier of the network.
        labels: Class labels in output-channel order.
        input_shape: Network input shape as (N, C, H, W).
        output_shape: Network output shape, (N, num_labels, ...).
        max_batch_size: Largest batch a single request may carry.
        model_path: Optional path of the weights file.
    """
    model_name: str
    labels: Tuple[str, ...]
    input_shape: Tuple[int, int, int, int]
    output_shape: Tuple[int, ...]
    max_batch_size: int = 16
    model_path: Optional[str] = None

    def __post_init__(self):
        if not self.labels:
            raise ValueError("Emotion model requires at least one label")
        if len(self.input_shape) != 4:
            raise ValueError(f"input_shape must be (N, C, H, W), got {self.input_shape}")
        if self.max_batch_size <= 0:
            raise ValueError("max_batch_size must be a positive integer")

    @property
    def input_channels(self) -> int:
        return int(self.input_shape[1])

    @property
    def input_height(self) -> int:
        return int(self.input_shape[2])

    @property
    def input_width(self) -> int:
        return int(self.input_shape[3])

    @property
    def num_labels(self) -> int:
        return len(self.labels)

    def get_labels(self) -> Tuple[str, ...]:
        return self.labels

    @classmethod
    def create(
        cls,
        labels: Sequence[str],
        input_size: Tuple[int, int] = (64, 64),
        channels: int = 3,
        max_batch_size: int = 16,
        model_name: str = "emotions-recognition",
    ) -> "EmotionDetectionModel":
        """Build a descriptor from labels and an input (width, height)."""
        w, h = input_size
        return cls(
            model_name=model_name,
            labels=tuple(labels),
            input_shape=(1, channels, h, w),
            output_shape=(1, len(labels), 1, 1),
            max_batch_size=max_batch_size,
        )

    @classmethod
    def from_config(cls, cfg: ModelConfig) -> "EmotionDetectionModel":
        """Adapter: Create from the typed model config."""
        return cls(
            model_name=cfg.name,
            labels=tuple(cfg.labels),
            input_shape=tuple(cfg.input_shape),
            output_shape=tuple(cfg.output_shape),
            max_batch_size=cfg.max_batch_size,
            model_path=cfg.path,
        )
