"""Utility helpers: cancellation, timing and logging setup."""

from .benchmarking import ThroughputStats, Timer
from .cancellation import check_cancelled
from .logging_setup import setup_logging

__all__ = ["Timer", "ThroughputStats", "check_cancelled", "setup_logging"]
