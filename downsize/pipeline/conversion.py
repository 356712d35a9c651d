"""
The three conversion entry points: `image`, `video` and `still`.

Each entry point makes sure the target's directory exists, translates the
options and hands the work to the matching engine. `image` and `still` block
until the output is written and raise on failure; `video` returns a running
`VideoJob` handle.
"""

from pathlib import Path
from typing import Any, Optional

from loguru import logger

from ..domain.options import coerce_options
from ..services.argument_translator import build_image_plan
from ..services.gif_converter import create_animated_gif
from ..services.image_engine import run_image_plan
from ..services.progress import ProgressListener
from ..services.still_extractor import extract_frame
from ..services.video_converter import VideoJob
from ..utils.format_utils import formatted_size
from ..utils.fs_utils import ensure_parent_dir


def image(source, target, options: Optional[Any] = None) -> None:
    """
    Converts and/or resizes an image.

    GIF sources are either passed to gifsicle whole (`animated=True`) or
    reduced to their first frame.

    Args:
        source: Path of the input image.
        target: Path of the output image; its extension selects the format
                unless `options.format` is set.
        options: A `ConversionOptions`, a mapping of its fields, or None.

    Raises:
        ImageReadException: The source or watermark cannot be read.
        EngineInvocationException: The output format is unsupported, or
            gifsicle failed.
        FilesystemException: The output cannot be written.
        InvalidOptionsException: The options are invalid.
    """
    options = coerce_options(options)
    source, target = Path(source), Path(target)
    ensure_parent_dir(target)

    plan = build_image_plan(source, options)
    if plan.animated:
        logger.debug(f"Animated GIF '{source}' -> '{target}'")
        create_animated_gif(source, target, options)
    else:
        run_image_plan(plan, target)

    logger.info(f"Converted '{source.name}' -> '{target}' ({formatted_size(target.stat().st_size)})")


def video(
    source,
    target,
    options: Optional[Any] = None,
    on_progress: Optional[ProgressListener] = None,
) -> VideoJob:
    """
    Starts transcoding a video and returns its job handle.

    Args:
        source: Path of the input video.
        target: Path of the output video.
        options: A `ConversionOptions`, a mapping of its fields, or None.
        on_progress: Optional listener subscribed before ffmpeg starts, so it
                     receives every progress percentage.

    Returns:
        The started `VideoJob`. Call `wait()` to block until it finishes and
        to re-raise its error, if any.
    """
    job = VideoJob(source, target, coerce_options(options))
    if on_progress is not None:
        job.on_progress(on_progress)
    return job.start()


def still(source, target, options: Optional[Any] = None) -> None:
    """
    Extracts a still frame from a video and resizes it.

    The frame is written to `target` by ffmpeg, then run through `image`
    with the same options, overwriting `target` in place.

    Raises:
        ToolNotFoundException: ffmpeg is not available.
        ImageReadException: No frame could be extracted.
        The other exceptions raised by `image`.
    """
    options = coerce_options(options)
    source, target = Path(source), Path(target)
    ensure_parent_dir(target)

    extract_frame(source, target)
    image(target, target, options)
