"""
Inference result models.

A Result carries the location of a classified ROI in the coordinate space
of the original input frame. Result kinds add their own payload and
advertise it through capability queries, so consumers (filters, outputs)
can read a payload without checking the concrete class.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Tuple

from .detection import BoundingBox


# Confidence value used while a result has not been scored
UNSET_CONFIDENCE = -1.0


@dataclass(frozen=True)
class Result:
    """
    Base inference result.

    Attributes:
        location: ROI in pixel coordinates of the input frame.
    """
    location: BoundingBox

    # Payload attribute names supported by this result kind
    ATTRIBUTES: ClassVar[Tuple[str, ...]] = ()

    def get_location(self) -> BoundingBox:
        return self.location

    def attributes(self) -> Tuple[str, ...]:
        return self.ATTRIBUTES

    def supports(self, name: str) -> bool:
        return name in self.ATTRIBUTES

    def get_attribute(self, name: str) -> Any:
        """
        Read a payload attribute by name.

        Raises:
            KeyError: If this result kind does not carry the attribute.
        """
        if not self.supports(name):
            raise KeyError(f"{type(self).__name__} has no attribute '{name}'")
        return getattr(self, name)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"location": list(self.location.as_tuple())}
        for name in self.ATTRIBUTES:
            d[name] = getattr(self, name)
        return d


@dataclass(frozen=True)
class EmotionsResult(Result):
    """
    Emotion classification of a single face ROI.

    Attributes:
        label: Predicted emotion, one of the model labels ("" until scored).
        confidence: Score of the predicted label, or -1 when unset.
    """
    label: str = ""
    confidence: float = UNSET_CONFIDENCE

    ATTRIBUTES: ClassVar[Tuple[str, ...]] = ("label", "confidence")

    def get_label(self) -> str:
        return self.label

    @property
    def is_scored(self) -> bool:
        return self.confidence != UNSET_CONFIDENCE
