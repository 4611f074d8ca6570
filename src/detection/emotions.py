"""
Emotion classification of face ROIs.

EmotionsDetection batches face crops of one frame, classifies them with a
single backend request and keeps one EmotionsResult per ROI. Results are
valid until the next successful fetch replaces them.

Example:
    detector = EmotionsDetection(backend, model)
    for roi in face_rois:
        detector.enqueue(frame, roi)
    detector.submit_request()
    if detector.fetch_results():
        for i in range(detector.get_results_length()):
            result = detector.get_location_result(i)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import cv2
import numpy as np

from inference.backend import InferenceBackend
from inference.model import EmotionDetectionModel
from models.config import Config
from models.detection import BoundingBox
from models.result import EmotionsResult
from .base import BaseInference, crop_and_resize
from .roi_filter import filter_rois


class EmotionsDetection(BaseInference):
    """Emotion classifier over face ROIs."""

    NAME = "Emotions Detection"

    def __init__(
        self,
        backend: InferenceBackend,
        model: Optional[EmotionDetectionModel] = None,
        blocking_fetch: bool = True,
        fetch_timeout: Optional[float] = None,
    ):
        super().__init__(backend, blocking_fetch=blocking_fetch, fetch_timeout=fetch_timeout)
        self.valid_model: Optional[EmotionDetectionModel] = None
        self._results: List[EmotionsResult] = []
        if model is not None:
            self.load_network(model)

    def load_network(self, model: EmotionDetectionModel) -> None:
        """Attach the model descriptor used to prepare inputs and decode outputs."""
        self.valid_model = model
        self.max_batch_size = model.max_batch_size
        logging.info(
            f"{self.NAME}: using model {model.model_name} "
            f"(input={model.input_width}x{model.input_height}, labels={list(model.labels)}, "
            f"max_batch={model.max_batch_size})"
        )

    def enqueue(self, frame: np.ndarray, roi: BoundingBox) -> bool:
        """
        Buffer the ROI of `frame` for the next request.

        Args:
            frame: Full input frame (HxW or HxWxC).
            roi: Region to classify, in `frame` pixel coordinates.

        Returns:
            False if no model is loaded, the ROI is empty or outside the
            frame, the frame cannot be converted to the model input, the
            batch is full, or a request is in flight.
        """
        if self.valid_model is None:
            logging.warning(f"{self.NAME}: enqueue called before load_network")
            return False
        if frame is None or frame.ndim < 2:
            logging.warning(f"{self.NAME}: invalid frame")
            return False

        frame_h, frame_w = frame.shape[:2]
        if not roi.is_inside(frame_w, frame_h):
            logging.warning(
                f"{self.NAME}: ROI {roi.as_tuple()} is empty or outside frame {frame_w}x{frame_h}"
            )
            return False
        x1, y1, x2, y2 = roi.as_int_tuple()
        if x2 <= x1 or y2 <= y1:
            logging.warning(f"{self.NAME}: ROI {roi.as_tuple()} is smaller than one pixel")
            return False
        if not self._can_enqueue(roi):
            return False

        model = self.valid_model
        try:
            image = crop_and_resize(
                frame, roi, model.input_width, model.input_height, model.input_channels
            )
        except (ValueError, cv2.error) as e:
            logging.warning(
                f"{self.NAME}: cannot preprocess ROI {roi.as_tuple()} of {frame.dtype} frame {frame.shape}: {e}"
            )
            return False
        return self._enqueue_entry(image, roi)

    def _store_results(self, output: np.ndarray, rois: Sequence[BoundingBox]) -> bool:
        labels = self.valid_model.labels
        n = len(rois)
        output = np.asarray(output)

        if output.ndim == 0 or output.shape[0] < n:
            logging.error(
                f"{self.NAME}: output tensor {output.shape} has fewer rows than batch size {n}"
            )
            return False
        scores = output[:n].reshape(n, -1)
        if scores.shape[1] != len(labels):
            logging.error(
                f"{self.NAME}: output has {scores.shape[1]} scores per ROI but model has {len(labels)} labels"
            )
            return False

        class_ids = np.argmax(scores, axis=1)
        self._results = [
            EmotionsResult(
                location=roi,
                label=labels[int(k)],
                confidence=float(scores[i, k]),
            )
            for i, (roi, k) in enumerate(zip(rois, class_ids))
        ]
        logging.debug(f"{self.NAME}: stored {n} results: {[r.label for r in self._results]}")
        return True

    def get_results_length(self) -> int:
        return len(self._results)

    def get_location_result(self, idx: int) -> Optional[EmotionsResult]:
        """
        Result at `idx`; its location is the ROI given to the idx-th enqueue.

        Returns None for an out-of-range index.
        """
        if not 0 <= idx < len(self._results):
            logging.warning(f"{self.NAME}: result index {idx} out of range ({len(self._results)})")
            return None
        return self._results[idx]

    def get_results(self) -> List[EmotionsResult]:
        return list(self._results)

    def get_name(self) -> str:
        return self.NAME

    def observe_output(self, output) -> None:
        """Hand the current results to an output sink."""
        output.accept(self.get_results())

    def get_filtered_rois(self, filter_conditions: str) -> List[BoundingBox]:
        return filter_rois(self._results, filter_conditions)


def create_emotions_detection_from_config(
    config: Union[Config, Dict[str, Any]],
    backend: Optional[InferenceBackend] = None,
) -> EmotionsDetection:
    """
    Factory function to create an EmotionsDetection from config.

    Args:
        config: Typed Config or the raw dict from load_config().
        backend: Backend to use. When omitted an OpenCV DNN backend is
            created from model.path.
    """
    cfg = config if isinstance(config, Config) else Config.from_dict(config)
    model = EmotionDetectionModel.from_config(cfg.model)

    if backend is None:
        if cfg.inference.backend != "opencv":
            raise ValueError(f"Unsupported inference backend: {cfg.inference.backend}")
        if not cfg.model.path:
            raise ValueError("model.path is required for the opencv backend")
        from inference.cv_dnn_backend import CvDnnConfig, OpenCvDnnBackend
        backend = OpenCvDnnBackend(CvDnnConfig(model=cfg.model.path))

    return EmotionsDetection(
        backend,
        model,
        blocking_fetch=cfg.inference.blocking_fetch,
        fetch_timeout=cfg.inference.fetch_timeout,
    )
