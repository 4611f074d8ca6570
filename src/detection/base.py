"""
Base inference lifecycle for ROI classifiers.

An inference object buffers ROI crops for the current frame, submits them
as one batch to the backend, and fetches the raw output when the backend
is done:

    IDLE -> ACCUMULATING (enqueue) -> IN_FLIGHT (submit_request)
         -> READY (fetch_results) -> ACCUMULATING / IDLE

Illegal transitions are reported by returning False; nothing here raises
across enqueue/submit/fetch, so the pipeline can keep processing frames
after a single bad cycle.

Instances are not thread-safe. Use one instance per pipeline thread.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

import cv2
import numpy as np

from inference.backend import InferenceBackend, PollResult, RequestHandle
from models.detection import BoundingBox
from models.result import Result


class InferenceState(Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    IN_FLIGHT = "in_flight"
    READY = "ready"


@dataclass(frozen=True)
class EnqueueEntry:
    """A preprocessed ROI crop (CHW) and its rectangle in frame coordinates."""
    image: np.ndarray
    roi: BoundingBox


def crop_and_resize(
    frame: np.ndarray,
    roi: BoundingBox,
    width: int,
    height: int,
    channels: int = 3,
) -> np.ndarray:
    """
    Cut `roi` out of `frame` and convert it to a CHW float32 network input.

    The ROI must already be validated against the frame bounds. Gray, BGR
    and BGRA frames are converted to `channels` (1 or 3).

    Raises:
        ValueError: If the frame layout cannot be converted to `channels`.
        cv2.error: If OpenCV does not support the frame dtype.
    """
    x1, y1, x2, y2 = roi.as_int_tuple()
    crop = frame[y1:y2, x1:x2]
    resized = cv2.resize(crop, (width, height))

    if resized.ndim == 2:
        resized = resized[:, :, np.newaxis]
    src_channels = resized.shape[2]
    if src_channels == 1 and channels == 3:
        resized = cv2.cvtColor(resized, cv2.COLOR_GRAY2BGR)
    elif src_channels == 3 and channels == 1:
        resized = cv2.cvtColor(resized, cv2.COLOR_BGR2GRAY)
    elif src_channels == 4 and channels == 3:
        resized = cv2.cvtColor(resized, cv2.COLOR_BGRA2BGR)
    elif src_channels == 4 and channels == 1:
        resized = cv2.cvtColor(resized, cv2.COLOR_BGRA2GRAY)

    if resized.ndim == 2:
        resized = resized[:, :, np.newaxis]
    if resized.shape != (height, width, channels):
        raise ValueError(
            f"cannot convert {src_channels}-channel frame to {channels}-channel input"
        )

    return np.transpose(resized, (2, 0, 1)).astype(np.float32)


class BaseInference(ABC):
    """
    Enqueue buffer and request controller shared by inference kinds.

    Subclasses prepare inputs in enqueue() and decode the raw output
    tensor in _store_results().
    """

    def __init__(
        self,
        backend: InferenceBackend,
        blocking_fetch: bool = True,
        fetch_timeout: Optional[float] = None,
    ):
        """
        Args:
            backend: Batch inference backend.
            blocking_fetch: Wait for the backend in fetch_results(). When False
                fetch_results() polls once and returns False while pending.
            fetch_timeout: Seconds to wait in blocking mode (None = forever).
        """
        self._backend = backend
        self.blocking_fetch = blocking_fetch
        self.fetch_timeout = fetch_timeout
        self.max_batch_size = 1
        self._entries: List[EnqueueEntry] = []
        self._handle: Optional[RequestHandle] = None
        self._submit_error: Optional[BaseException] = None
        self._in_flight = False
        self._state = InferenceState.IDLE

    @property
    def state(self) -> InferenceState:
        return self._state

    @property
    def is_in_flight(self) -> bool:
        return self._in_flight

    def get_enqueued_num(self) -> int:
        """Number of ROIs buffered for the next (or in-flight) request."""
        return len(self._entries)

    def _can_enqueue(self, roi: BoundingBox) -> bool:
        if self._in_flight:
            logging.warning(f"{self.get_name()}: cannot enqueue while a request is in flight")
            return False
        if len(self._entries) >= self.max_batch_size:
            logging.warning(
                f"{self.get_name()}: batch is full ({self.max_batch_size}), dropping ROI {roi.as_int_tuple()}"
            )
            return False
        return True

    def _enqueue_entry(self, image: np.ndarray, roi: BoundingBox) -> bool:
        if not self._can_enqueue(roi):
            return False
        self._entries.append(EnqueueEntry(image=image, roi=roi))
        self._state = InferenceState.ACCUMULATING
        return True

    def submit_request(self) -> bool:
        """
        Start inference for all buffered ROIs as one batch.

        Returns:
            False when nothing is buffered or a request is already in flight.
        """
        if self._in_flight:
            logging.warning(f"{self.get_name()}: request already in flight, fetch results first")
            return False
        if not self._entries:
            logging.warning(f"{self.get_name()}: nothing enqueued, request not submitted")
            return False

        self._handle = None
        self._submit_error = None
        try:
            batch = np.stack([e.image for e in self._entries])
            self._handle = self._backend.run_batch(batch)
        except Exception as e:
            # Reported by the next fetch_results()
            logging.error(f"{self.get_name()}: could not submit batch of {len(self._entries)}: {e}")
            self._submit_error = e

        self._in_flight = True
        self._state = InferenceState.IN_FLIGHT
        return True

    def fetch_results(self) -> bool:
        """
        Collect the in-flight request and store one result per buffered ROI.

        The enqueue buffer is cleared once the request completes, whether or
        not the results could be stored.

        Returns:
            True if new results were stored. False means "no new results this
            cycle": nothing in flight, still pending (non-blocking mode),
            backend error, or a malformed output tensor.
        """
        if not self._in_flight:
            logging.warning(f"{self.get_name()}: no request in flight, nothing to fetch")
            return False

        poll = self._await_request()
        if poll.is_pending:
            return False

        entries = self._entries
        self._entries = []
        self._handle = None
        self._submit_error = None
        self._in_flight = False
        self._state = InferenceState.READY if self.get_results_length() else InferenceState.IDLE

        if not entries:
            logging.warning(f"{self.get_name()}: request had zero entries")
            return False
        if not poll.is_done:
            logging.error(f"{self.get_name()}: inference failed for batch of {len(entries)}: {poll.error}")
            return False

        try:
            stored = self._store_results(poll.output, [e.roi for e in entries])
        except (TypeError, ValueError) as e:
            logging.error(f"{self.get_name()}: cannot decode output tensor: {e}")
            return False
        if not stored:
            return False

        self._state = InferenceState.READY
        return True

    def _await_request(self) -> PollResult:
        if self._submit_error is not None:
            return PollResult.failed(self._submit_error)
        if self._handle is None:
            return PollResult.failed(RuntimeError("request has no backend handle"))
        try:
            if self.blocking_fetch:
                return self._backend.wait(self._handle, timeout=self.fetch_timeout)
            return self._backend.poll(self._handle)
        except Exception as e:
            return PollResult.failed(e)

    @abstractmethod
    def enqueue(self, frame: np.ndarray, roi: BoundingBox) -> bool:
        """Buffer one ROI of `frame` for the next request."""
        pass

    @abstractmethod
    def _store_results(self, output: np.ndarray, rois: Sequence[BoundingBox]) -> bool:
        """Decode `output` (one row per ROI, in order) and replace the result store."""
        pass

    @abstractmethod
    def get_results_length(self) -> int:
        pass

    @abstractmethod
    def get_location_result(self, idx: int) -> Optional[Result]:
        pass

    @abstractmethod
    def get_name(self) -> str:
        pass

    @abstractmethod
    def get_filtered_rois(self, filter_conditions: str) -> List[BoundingBox]:
        pass

    @abstractmethod
    def observe_output(self, output) -> None:
        pass
