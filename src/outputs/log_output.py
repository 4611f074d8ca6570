"""
Logging output sink.
"""

from __future__ import annotations

import logging
from typing import List

from models.result import Result
from .base import BaseOutput


class LogOutput(BaseOutput):
    """Writes one log line per published result."""

    def __init__(self, name: str = "log", level: int = logging.INFO):
        super().__init__(name)
        self.level = level
        self.published_count = 0

    def _publish(self, results: List[Result]) -> None:
        for r in results:
            payload = ", ".join(f"{k}={r.get_attribute(k)}" for k in r.attributes())
            logging.log(self.level, f"[{self.name}] roi={r.get_location().as_int_tuple()} {payload}")
        self.published_count += len(results)
