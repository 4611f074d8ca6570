"""
Thread-pool inference backend.

Wraps any synchronous batch forward function and runs it on a worker
thread, so the caller can submit a batch and collect it later. The
executor is owned by the backend; close() shuts it down.
"""

from __future__ import annotations

import itertools
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as futures_wait
from typing import Callable, Dict, Optional

import numpy as np

from .backend import InferenceBackend, PollResult, RequestHandle

ForwardFn = Callable[[np.ndarray], np.ndarray]


class ExecutorBackend(InferenceBackend):
    """
    Runs `forward(batch) -> output` asynchronously.

    A single worker keeps forward passes serialized, which suits networks
    that are not safe to call from several threads at once.
    """

    def __init__(self, forward: ForwardFn, max_workers: int = 1):
        self._forward = forward
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="inference",
        )
        self._futures: Dict[int, Future] = {}
        self._ids = itertools.count(1)

    def run_batch(self, images: np.ndarray) -> RequestHandle:
        batch = np.asarray(images)
        handle = RequestHandle(request_id=next(self._ids), batch_size=int(batch.shape[0]))
        self._futures[handle.request_id] = self._executor.submit(self._forward, batch)
        logging.debug(f"Submitted inference request {handle.request_id} (batch={handle.batch_size})")
        return handle

    def poll(self, handle: RequestHandle) -> PollResult:
        future = self._futures.get(handle.request_id)
        if future is None:
            return PollResult.failed(KeyError(f"Unknown inference request {handle.request_id}"))
        if not future.done():
            return PollResult.pending()
        return self._collect(handle, future)

    def wait(self, handle: RequestHandle, timeout: Optional[float] = None) -> PollResult:
        future = self._futures.get(handle.request_id)
        if future is None:
            return PollResult.failed(KeyError(f"Unknown inference request {handle.request_id}"))
        done, _ = futures_wait([future], timeout=timeout)
        if not done:
            # Request keeps running on the worker; its output is discarded
            self._futures.pop(handle.request_id, None)
            return PollResult.failed(
                TimeoutError(f"Inference request {handle.request_id} timed out after {timeout}s")
            )
        return self._collect(handle, future)

    def _collect(self, handle: RequestHandle, future: Future) -> PollResult:
        self._futures.pop(handle.request_id, None)
        error = future.exception()
        if error is not None:
            return PollResult.failed(error)
        return PollResult.done(np.asarray(future.result()))

    @property
    def pending_requests(self) -> int:
        return len(self._futures)

    def close(self) -> None:
        """Wait for running requests and release the worker thread."""
        self._executor.shutdown(wait=True)
        self._futures.clear()

    def __enter__(self) -> "ExecutorBackend":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
