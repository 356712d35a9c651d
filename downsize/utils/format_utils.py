"""
This module contains helper functions for formatting and parsing values that
show up in logs and in ffmpeg output, such as time durations and file sizes.
"""

import re
from datetime import timedelta

from loguru import logger

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_timedelta(elapsed: timedelta) -> str:
    """Formats the elapsed time of a job as HH:MM:SS."""
    minutes, seconds = divmod(int(elapsed.total_seconds()), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02}:{minutes:02}:{seconds:02}"


def formatted_size(size_bytes: int) -> str:
    """Formats an output file size for the conversion log line, e.g. 1536 -> "1.50 KB", 2 MiB -> "2 MB"."""
    size = max(size_bytes, 0)
    unit = 0
    while size >= 1024 and unit < len(_SIZE_UNITS) - 1:
        size /= 1024
        unit += 1
    if unit == 0:
        return f"{size} B"
    return f"{size:.2f}".removesuffix(".00") + f" {_SIZE_UNITS[unit]}"


def parse_timecode(timecode: str) -> float | None:
    """
    Parses a duration or timestamp string into total seconds.

    Two formats are accepted, both produced by ffmpeg/ffprobe:
    1. A plain number of seconds (e.g., "3600.5").
    2. A timecode 'HH:MM:SS.ssssss' (e.g., "01:00:00.500000"). Hours are optional.

    Args:
        timecode: The string to parse.

    Returns:
        The value in seconds, or None when the string is empty, "N/A" or
        otherwise unparseable.
    """
    if not timecode:
        return None
    timecode = timecode.strip()
    try:
        return float(timecode)
    except ValueError:
        pass

    match = re.fullmatch(r"(-)?(?:(\d+):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)", timecode)
    if match:
        negative, hours_str, minutes_str, seconds_str = match.groups()
        hours = int(hours_str) if hours_str else 0
        total = hours * 3600 + int(minutes_str) * 60 + float(seconds_str)
        return -total if negative else total
    if timecode != "N/A":
        logger.warning(f"Could not parse timecode string: {timecode}")
    return None
