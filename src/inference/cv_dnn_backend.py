"""
OpenCV DNN inference backend.

Runs the emotion network through cv2.dnn (ONNX, OpenVINO IR, Caffe, ...)
on the executor worker thread. This keeps the project runnable on dev
machines without a vendor inference runtime.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from .executor_backend import ExecutorBackend


@dataclass(frozen=True)
class CvDnnConfig:
    model: str
    config: Optional[str] = None
    preferable_backend: int = cv2.dnn.DNN_BACKEND_DEFAULT
    preferable_target: int = cv2.dnn.DNN_TARGET_CPU


class OpenCvDnnBackend(ExecutorBackend):
    def __init__(self, cfg: CvDnnConfig):
        self.cfg = cfg
        try:
            net = cv2.dnn.readNet(cfg.model, cfg.config or "")
        except cv2.error as e:
            raise RuntimeError(f"Failed to load network from {cfg.model}: {e}") from e

        net.setPreferableBackend(cfg.preferable_backend)
        net.setPreferableTarget(cfg.preferable_target)
        self._net = net
        super().__init__(self._forward_batch, max_workers=1)
        logging.info(f"OpenCV DNN backend loaded model {cfg.model}")

    def _forward_batch(self, batch: np.ndarray) -> np.ndarray:
        self._net.setInput(np.ascontiguousarray(batch, dtype=np.float32))
        return self._net.forward()
