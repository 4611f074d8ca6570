"""
Inference backend interface.

A backend runs a batched forward pass asynchronously. Callers hand over a
batch with run_batch() and later collect the raw output tensor with poll()
or wait(). Backends never raise from poll()/wait(); failures are reported
as an ERROR PollResult.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

import numpy as np


class RequestStatus(Enum):
    PENDING = "pending"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class RequestHandle:
    """Opaque ticket for one submitted batch."""
    request_id: int
    batch_size: int


@dataclass(frozen=True)
class PollResult:
    status: RequestStatus
    output: Optional[np.ndarray] = None
    error: Optional[BaseException] = None

    @property
    def is_done(self) -> bool:
        return self.status is RequestStatus.DONE

    @property
    def is_pending(self) -> bool:
        return self.status is RequestStatus.PENDING

    @classmethod
    def pending(cls) -> "PollResult":
        return cls(status=RequestStatus.PENDING)

    @classmethod
    def done(cls, output: np.ndarray) -> "PollResult":
        return cls(status=RequestStatus.DONE, output=output)

    @classmethod
    def failed(cls, error: BaseException) -> "PollResult":
        return cls(status=RequestStatus.ERROR, error=error)


class InferenceBackend(Protocol):
    def run_batch(self, images: np.ndarray) -> RequestHandle:
        ...

    def poll(self, handle: RequestHandle) -> PollResult:
        ...

    def wait(self, handle: RequestHandle, timeout: Optional[float] = None) -> PollResult:
        ...
