"""
Output sink interface.

An inference object hands its current results to a sink through
observe_output(); the pipeline later calls handle_output() to publish
whatever the sink collected.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

from models.result import Result


class BaseOutput(ABC):
    """
    Abstract base class for result sinks.

    Lifecycle per frame:
        1. inference.observe_output(sink) -> sink.accept(results)
        2. sink.handle_output()
    """

    def __init__(self, name: str = "output"):
        self.name = name
        self._pending: List[Result] = []

    def accept(self, results: Sequence[Result]) -> None:
        """Take a copy of the results for the next handle_output()."""
        self._pending.extend(results)

    @property
    def pending(self) -> List[Result]:
        return list(self._pending)

    def handle_output(self) -> None:
        """Publish and clear the accepted results."""
        results, self._pending = self._pending, []
        self._publish(results)

    @abstractmethod
    def _publish(self, results: List[Result]) -> None:
        pass
