"""
This module provides functions for running the external engines: a wrapper
around `subprocess.run` with consistent logging and error mapping, and a
duration lookup through ffprobe used for progress reporting.
"""

import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

import ffmpeg
from loguru import logger

from ..config.common import STDERR_TAIL_LENGTH
from ..domain.exceptions import ToolNotFoundException
from .format_utils import parse_timecode
from .tools import Tools


def display_cmd(cmd_list: List[str]) -> str:
    """Joins a command list into a string that can be pasted into a shell."""
    if os.name == "nt":
        return subprocess.list2cmdline(cmd_list)
    return shlex.join(cmd_list)


def stderr_tail(stderr: Optional[str]) -> str:
    """Returns the last part of a process's stderr, for error messages."""
    if not stderr:
        return ""
    stderr = stderr.strip()
    if len(stderr) > STDERR_TAIL_LENGTH:
        return "..." + stderr[-STDERR_TAIL_LENGTH:]
    return stderr


def run_cmd(cmd_list: List[str]) -> subprocess.CompletedProcess:
    """
    Executes an external command and captures its output.

    This is a wrapper around `subprocess.run` that adds logging. The caller
    decides what a nonzero return code means; this function only raises when
    the process could not be started at all.

    Args:
        cmd_list: The command to execute, as a list of strings. Non-string
                  items (e.g. numbers, paths) are converted with `str`.

    Returns:
        The `subprocess.CompletedProcess`, with decoded stdout and stderr.

    Raises:
        ToolNotFoundException: If the executable does not exist or cannot be run.
    """
    cmd_list = [str(part) for part in cmd_list]
    logger.debug(f"Executing command: {display_cmd(cmd_list)}")

    try:
        result = subprocess.run(
            cmd_list,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            shell=False,
        )
    except (FileNotFoundError, PermissionError) as e:
        logger.error(
            f"Could not start '{cmd_list[0]}': {e}. Ensure it's in your system's PATH or configured in 'config.user.yaml'."
        )
        raise ToolNotFoundException(f"Could not start '{cmd_list[0]}': {e}") from e

    if result.stdout and len(result.stdout) > 500:
        logger.trace(f"Command stdout (truncated): {result.stdout[:500]}...")
    elif result.stdout:
        logger.trace(f"Command stdout: {result.stdout}")

    # Distinguish between error output and informational warnings on stderr.
    if result.stderr and result.returncode != 0:
        logger.debug(f"Command stderr (error, rc={result.returncode}): {result.stderr}")
    elif result.stderr:
        logger.trace(f"Command stderr (non-error, rc={result.returncode}): {result.stderr}")

    return result


def media_duration(path: Path) -> Optional[float]:
    """
    Looks up the duration of a media file in seconds with ffprobe.

    The container duration is preferred; the longest stream duration is used
    when the container does not report one.

    Returns:
        The duration in seconds, or None if ffprobe cannot read the file or it has
        no usable duration. Progress percentages are not available in that case.
    """
    try:
        info = ffmpeg.probe(str(path), cmd=Tools.ffprobe())
    except ffmpeg.Error as e:
        stderr = e.stderr.decode("utf-8", errors="replace") if isinstance(e.stderr, bytes) else e.stderr
        logger.warning(f"ffprobe failed for {path}: {stderr_tail(stderr)}")
        return None
    except FileNotFoundError:
        logger.warning(f"ffprobe not found; progress for {path} will not be reported.")
        return None

    duration = parse_timecode(str(info.get("format", {}).get("duration", "")))
    if duration and duration > 0:
        return duration

    stream_durations = [
        parse_timecode(str(stream.get("duration", ""))) for stream in info.get("streams", [])
    ]
    stream_durations = [d for d in stream_durations if d and d > 0]
    return max(stream_durations) if stream_durations else None
