"""
Frame extraction for still images.

Extraction is tried at most twice. The first attempt seeks a little into the
video to skip a possible black leading frame; if that leaves no file behind
(e.g. the video is shorter than the offset), the first frame is taken instead.
The only success signal is whether the target file exists afterwards.
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config.video import STILL_FRAME_OFFSET
from ..utils.ffmpeg_utils import run_cmd, stderr_tail
from ..utils.tools import Tools
from .argument_translator import build_frame_args


class ExtractionAttempt(Enum):
    OFFSET = "offset"
    DEFAULT = "default"

    @property
    def seek(self) -> Optional[str]:
        return STILL_FRAME_OFFSET if self is ExtractionAttempt.OFFSET else None


def _attempt(source: Path, target: Path, attempt: ExtractionAttempt) -> None:
    cmd = [Tools.ffmpeg()] + build_frame_args(source, target, offset=attempt.seek)
    # A missing ffmpeg raises ToolNotFoundException here; only exit codes are tolerated.
    result = run_cmd(cmd)
    if result.returncode != 0:
        logger.warning(
            f"Frame extraction ({attempt.value}) exited with {result.returncode} for '{source}': "
            f"{stderr_tail(result.stderr)}"
        )


def extract_frame(source: Path, target: Path) -> ExtractionAttempt:
    """
    Writes one frame of `source` to `target`.

    Moves from the `offset` attempt to the `default` attempt only when the
    target does not exist after the first one. The outcome of the last attempt
    is not checked here: a missing frame surfaces when the image is read
    afterwards.

    Returns:
        The attempt that ran last.
    """
    attempt = ExtractionAttempt.OFFSET
    while True:
        _attempt(source, target, attempt)
        if target.exists() or attempt is ExtractionAttempt.DEFAULT:
            break
        logger.warning(f"No frame at {STILL_FRAME_OFFSET}s in '{source}', retrying with the first frame")
        attempt = ExtractionAttempt.DEFAULT

    if target.exists():
        logger.debug(f"Extracted frame of '{source}' to '{target}' ({attempt.value})")
    else:
        logger.error(f"Frame extraction produced no file for '{source}'")
    return attempt
