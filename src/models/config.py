"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Class order of the emotions-recognition-retail-0003 network
DEFAULT_EMOTION_LABELS = ["neutral", "happy", "sad", "surprise", "anger"]


@dataclass
class ModelConfig:
    """Emotion model descriptor configuration."""
    name: str = "emotions-recognition-retail-0003"
    path: Optional[str] = None
    labels: List[str] = field(default_factory=lambda: list(DEFAULT_EMOTION_LABELS))
    input_shape: List[int] = field(default_factory=lambda: [1, 3, 64, 64])
    output_shape: List[int] = field(default_factory=lambda: [1, 5, 1, 1])
    max_batch_size: int = 16

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModelConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            name=d.get("name", "emotions-recognition-retail-0003"),
            path=d.get("path"),
            labels=list(d.get("labels", DEFAULT_EMOTION_LABELS)),
            input_shape=list(d.get("input_shape", [1, 3, 64, 64])),
            output_shape=list(d.get("output_shape", [1, 5, 1, 1])),
            max_batch_size=d.get("max_batch_size", 16),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "name": self.name,
            "labels": self.labels,
            "input_shape": self.input_shape,
            "output_shape": self.output_shape,
            "max_batch_size": self.max_batch_size,
        }
        if self.path is not None:
            d["path"] = self.path
        return d


@dataclass
class InferenceConfig:
    """Request lifecycle configuration."""
    backend: str = "opencv"
    blocking_fetch: bool = True
    fetch_timeout: Optional[float] = None
    filter_conditions: str = ""

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "InferenceConfig":
        return cls(
            backend=d.get("backend", "opencv"),
            blocking_fetch=d.get("blocking_fetch", True),
            fetch_timeout=d.get("fetch_timeout"),
            filter_conditions=d.get("filter_conditions", "") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "backend": self.backend,
            "blocking_fetch": self.blocking_fetch,
            "filter_conditions": self.filter_conditions,
        }
        if self.fetch_timeout is not None:
            d["fetch_timeout"] = self.fetch_timeout
        return d


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    model: ModelConfig = field(default_factory=ModelConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    log_path: str = "logs/roi_classifier.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            model=ModelConfig.from_dict(d.get("model", {}) or {}),
            inference=InferenceConfig.from_dict(d.get("inference", {}) or {}),
            log_path=d.get("log_path", "logs/roi_classifier.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or dumping to YAML)."""
        return {
            "model": self.model.to_dict(),
            "inference": self.inference.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
