"""
This module defines VideoJob, the handle returned for a video transcode.

The job runs ffmpeg on a background thread. Callers subscribe to progress
updates with `on_progress`, get notified of completion with
`add_done_callback`, and collect the outcome with `wait`, which re-raises the
job's error if it failed.
"""

import subprocess
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger

from ..config.video import FFMPEG_PROGRESS_ARGS
from ..domain.exceptions import (
    DownsizeException,
    EngineInvocationException,
    EngineProcessException,
    ToolNotFoundException,
)
from ..domain.options import ConversionOptions, coerce_options
from ..utils.ffmpeg_utils import display_cmd, media_duration, stderr_tail
from ..utils.format_utils import format_timedelta, formatted_size
from ..utils.fs_utils import ensure_parent_dir
from ..utils.tools import Tools
from .argument_translator import build_video_args
from .progress import ProgressListener, ProgressParser, ProgressTracker


class VideoJob:
    """
    A single ffmpeg transcode of `source` into `target`.

    The job is created idle; `start()` launches it. Listeners subscribed
    before `start()` see every progress update. Exactly one completion happens
    per job: either success, or an error stored on the job and re-raised by
    `wait()`.

    Attributes:
        source (Path): The input video.
        target (Path): The output file.
        options (ConversionOptions): The options the arguments were built from.
        args (list[str]): The translated ffmpeg arguments (without the
            executable and the progress options).
    """

    def __init__(self, source: Path, target: Path, options: Optional[ConversionOptions] = None):
        self.source = Path(source)
        self.target = Path(target)
        self.options = coerce_options(options)
        self.args: List[str] = build_video_args(self.source, self.target, self.options)

        self._tracker = ProgressTracker()
        self._done_event = threading.Event()
        self._done_callbacks: List[Callable[["VideoJob"], None]] = []
        self._callbacks_lock = threading.Lock()
        self._error: Optional[DownsizeException] = None
        self._thread: Optional[threading.Thread] = None

    def __repr__(self) -> str:
        state = "done" if self.done else ("running" if self._thread else "pending")
        return f"<VideoJob {self.source.name} -> {self.target.name} ({state})>"

    @property
    def command(self) -> List[str]:
        """The full command line executed for this job."""
        return [Tools.ffmpeg()] + FFMPEG_PROGRESS_ARGS + self.args

    @property
    def done(self) -> bool:
        return self._done_event.is_set()

    @property
    def progress(self) -> Optional[int]:
        """The last percentage delivered to listeners, or None before the first one."""
        return self._tracker.last

    def on_progress(self, listener: ProgressListener) -> "VideoJob":
        """Subscribes `listener` to progress percentages (ints, 0-100, increasing)."""
        self._tracker.subscribe(listener)
        return self

    def add_done_callback(self, fn: Callable[["VideoJob"], None]) -> None:
        """Calls `fn(job)` once the job completes, or immediately if it already has."""
        with self._callbacks_lock:
            if not self.done:
                self._done_callbacks.append(fn)
                return
        self._invoke_done_callback(fn)

    def start(self) -> "VideoJob":
        if self._thread is not None:
            raise RuntimeError(f"{self!r} has already been started")
        self._thread = threading.Thread(
            target=self._run, name=f"video-{self.target.name}", daemon=True
        )
        self._thread.start()
        return self

    def wait(self, timeout: Optional[float] = None) -> None:
        """
        Blocks until the job completes.

        Raises:
            TimeoutError: If `timeout` elapses first. The job keeps running.
            DownsizeException: The job's own error, if it failed.
        """
        if not self._done_event.wait(timeout):
            raise TimeoutError(f"{self!r} did not finish within {timeout} seconds")
        if self._error is not None:
            raise self._error

    def exception(self, timeout: Optional[float] = None) -> Optional[DownsizeException]:
        """Waits for completion and returns the job's error, or None on success."""
        if not self._done_event.wait(timeout):
            raise TimeoutError(f"{self!r} did not finish within {timeout} seconds")
        return self._error

    def _run(self):
        try:
            self._execute()
        except DownsizeException as e:
            self._error = e
        except Exception as e:
            logger.exception(f"Unexpected error while transcoding '{self.source}'")
            error = EngineInvocationException(f"Unexpected error while transcoding '{self.source}': {e}")
            error.__cause__ = e
            self._error = error
        finally:
            self._finish()

    def _execute(self):
        ensure_parent_dir(self.target)
        started = datetime.now()

        parser = ProgressParser(media_duration(self.source))
        cmd = self.command
        logger.debug(f"Executing command: {display_cmd(cmd)}")

        with tempfile.TemporaryFile(mode="w+", encoding="utf-8", errors="replace") as stderr_file:
            try:
                process = subprocess.Popen(
                    cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                )
            except (FileNotFoundError, PermissionError) as e:
                logger.error(f"Could not start '{cmd[0]}': {e}")
                raise ToolNotFoundException(f"Could not start '{cmd[0]}': {e}") from e

            with process:
                for line in process.stdout:
                    percent = parser.feed(line)
                    if percent is not None:
                        self._tracker.report(percent)
                returncode = process.wait()

            stderr_file.seek(0)
            stderr = stderr_tail(stderr_file.read())

        if returncode != 0:
            logger.error(f"ffmpeg failed for '{self.source}' (rc={returncode}): {stderr}")
            raise EngineProcessException(
                f"ffmpeg failed for '{self.source}' with exit code {returncode}",
                returncode=returncode,
                stderr=stderr,
            )

        if parser.finished:
            self._tracker.report(100)

        size = self.target.stat().st_size if self.target.exists() else 0
        logger.info(
            f"Transcoded '{self.source.name}' -> '{self.target}' "
            f"({formatted_size(size)}, {format_timedelta(datetime.now() - started)})"
        )

    def _finish(self):
        with self._callbacks_lock:
            self._done_event.set()
            callbacks, self._done_callbacks = self._done_callbacks, []
        for fn in callbacks:
            self._invoke_done_callback(fn)

    def _invoke_done_callback(self, fn):
        try:
            fn(self)
        except Exception:
            logger.exception(f"Done callback {fn!r} raised an exception")
