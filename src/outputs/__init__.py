"""
Output sinks for inference results.
"""

from .base import BaseOutput
from .log_output import LogOutput

__all__ = ["BaseOutput", "LogOutput"]
