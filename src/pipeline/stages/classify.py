"""
Classify stage for ROIs of a frame.

Runs one fetch cycle of an inference object per frame:
enqueue every ROI, submit one request, fetch, then hand results to the
registered outputs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from detection.base import BaseInference
from detection.emotions import create_emotions_detection_from_config
from inference.backend import InferenceBackend
from models.config import Config
from models.detection import BoundingBox
from models.frame import FrameData
from models.result import Result
from outputs.base import BaseOutput


@dataclass
class ClassifyStageConfig:
    """
    Configuration for the classify stage.

    Attributes:
        filter_conditions: Filter applied to the ROIs reported by filtered_rois().
        publish_outputs: Call handle_output() on each sink after observing.
    """
    filter_conditions: str = ""
    publish_outputs: bool = True


@dataclass
class ClassifyStats:
    frames: int = 0
    rois_enqueued: int = 0
    rois_rejected: int = 0
    failed_fetches: int = 0


class ClassifyStage:
    """
    Pipeline stage that classifies the ROIs of each frame.

    Example:
        stage = ClassifyStage(detector, ClassifyStageConfig())
        stage.add_output(LogOutput())

        # Each frame:
        results = stage.process(frame_data, face_rois)
    """

    def __init__(self, inference: BaseInference, config: Optional[ClassifyStageConfig] = None):
        self._inference = inference
        self._config = config or ClassifyStageConfig()
        self._outputs: List[BaseOutput] = []
        self._last_results: List[Result] = []
        self.stats = ClassifyStats()

    @property
    def inference(self) -> BaseInference:
        return self._inference

    def add_output(self, output: BaseOutput) -> None:
        self._outputs.append(output)

    def process(self, frame_data: FrameData, rois: Sequence[BoundingBox]) -> List[Result]:
        """
        Classify `rois` of one frame.

        Returns:
            Results of this frame in ROI order; empty when nothing could be
            classified.
        """
        self.stats.frames += 1
        self._last_results = []

        accepted = 0
        for roi in rois:
            if self._inference.enqueue(frame_data.frame, roi):
                accepted += 1
            else:
                self.stats.rois_rejected += 1
        self.stats.rois_enqueued += accepted

        if accepted == 0:
            return []
        if not self._inference.submit_request():
            return []
        if not self._inference.fetch_results():
            self.stats.failed_fetches += 1
            logging.warning(
                f"Frame {frame_data.frame_index}: no {self._inference.get_name()} results this cycle"
            )
            return []

        n = self._inference.get_results_length()
        self._last_results = [self._inference.get_location_result(i) for i in range(n)]
        self._notify_outputs()
        return list(self._last_results)

    def filtered_rois(self) -> List[BoundingBox]:
        """ROIs of the last processed frame that pass the configured filter."""
        if not self._last_results:
            return []
        return self._inference.get_filtered_rois(self._config.filter_conditions)

    def _notify_outputs(self) -> None:
        for output in self._outputs:
            try:
                self._inference.observe_output(output)
                if self._config.publish_outputs:
                    output.handle_output()
            except Exception as e:
                logging.warning(f"Output '{output.name}' error: {e}")


def create_classify_stage(
    inference: BaseInference,
    filter_conditions: str = "",
    outputs: Optional[Sequence[BaseOutput]] = None,
) -> ClassifyStage:
    """
    Factory function to create a ClassifyStage.

    Args:
        inference: Inference object running the fetch cycle.
        filter_conditions: ROI filter for filtered_rois().
        outputs: Sinks notified after every successful fetch.
    """
    stage = ClassifyStage(inference, ClassifyStageConfig(filter_conditions=filter_conditions))
    for output in outputs or []:
        stage.add_output(output)
    return stage


def create_classify_stage_from_config(
    config: Union[Config, Dict[str, Any]],
    backend: Optional[InferenceBackend] = None,
    outputs: Optional[Sequence[BaseOutput]] = None,
) -> ClassifyStage:
    """
    Factory function to build an emotions ClassifyStage from the YAML config.

    Args:
        config: Typed Config or the raw dict from load_config().
        backend: Optional backend override (see create_emotions_detection_from_config).
        outputs: Sinks notified after every successful fetch.
    """
    cfg = config if isinstance(config, Config) else Config.from_dict(config)
    detector = create_emotions_detection_from_config(cfg, backend=backend)
    return create_classify_stage(detector, cfg.inference.filter_conditions, outputs)
