"""
Progress reporting for long-running ffmpeg jobs.

ffmpeg is run with `-progress pipe:1`, which writes blocks of `key=value`
lines to stdout. `ProgressParser` turns those lines into percentages using the
source duration, and `ProgressTracker` fans the percentages out to listeners,
guaranteeing the sequence they see only ever increases and stays within 0-100.
"""

import math
import threading
from typing import Callable, List, Optional

from loguru import logger

from ..utils.format_utils import parse_timecode

ProgressListener = Callable[[int], None]


class ProgressParser:
    """
    Parses ffmpeg `-progress` output.

    Attributes:
        duration (float | None): Source duration in seconds. Without it no
            percentage can be computed.
        finished (bool): True once ffmpeg has written `progress=end`.
    """

    def __init__(self, duration: Optional[float]):
        self.duration = duration if duration and duration > 0 else None
        self.finished = False

    def feed(self, line: str) -> Optional[float]:
        """Consumes one output line and returns the percentage it implies, if any."""
        key, sep, value = line.strip().partition("=")
        if not sep:
            return None

        if key in ("out_time_us", "out_time_ms"):
            # Both keys carry microseconds.
            try:
                seconds = int(value) / 1_000_000
            except ValueError:
                return None
        elif key == "out_time":
            seconds = parse_timecode(value)
        elif key == "progress":
            self.finished = value.strip() == "end"
            return None
        else:
            return None

        if seconds is None or self.duration is None:
            return None
        return seconds / self.duration * 100


class ProgressTracker:
    """
    Delivers progress percentages to subscribed listeners.

    Reported values are clamped to 0-100 and truncated to whole percents.
    A value is only delivered when it is greater than the last delivered one,
    so duplicates and out-of-order updates from the engine are dropped.
    """

    def __init__(self):
        self._listeners: List[ProgressListener] = []
        self._last: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def last(self) -> Optional[int]:
        return self._last

    def subscribe(self, listener: ProgressListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def report(self, percent: float) -> Optional[int]:
        """
        Reports a new percentage.

        Returns:
            The delivered value, or None if it was dropped.
        """
        if percent is None or math.isnan(percent):
            return None
        value = int(max(0.0, min(100.0, percent)))

        with self._lock:
            if self._last is not None and value <= self._last:
                return None
            self._last = value
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(value)
            except Exception:
                # Listener errors are logged and never reach the job.
                logger.exception(f"Progress listener {listener!r} raised an exception")
        return value
