"""
Animated GIF conversion with gifsicle.

Pillow is only used to read the GIF's logical screen size, which gifsicle
needs for the centred crop when both dimensions are requested. Frame count
and timing are left to gifsicle, which preserves them.
"""

from pathlib import Path
from typing import Tuple

from loguru import logger
from PIL import Image, UnidentifiedImageError

from ..domain.exceptions import ImageReadException, EngineProcessException
from ..domain.options import ConversionOptions
from ..utils.ffmpeg_utils import run_cmd, stderr_tail
from ..utils.tools import Tools
from .argument_translator import build_gifsicle_args


def read_gif_size(source: Path) -> Tuple[int, int]:
    try:
        with Image.open(source) as gif:
            return gif.size
    except (FileNotFoundError, UnidentifiedImageError, OSError) as e:
        raise ImageReadException(f"Could not read GIF '{source}': {e}") from e


def create_animated_gif(source: Path, target: Path, options: ConversionOptions) -> None:
    """
    Resizes an animated GIF, keeping every frame.

    Raises:
        ImageReadException: If the source cannot be opened.
        ToolNotFoundException: If gifsicle is not available.
        EngineProcessException: If gifsicle exits with a nonzero status.
    """
    source_size = read_gif_size(source) if options.crops else None
    cmd = [Tools.gifsicle()] + build_gifsicle_args(source, target, options, source_size)

    result = run_cmd(cmd)
    if result.returncode != 0:
        tail = stderr_tail(result.stderr)
        logger.error(f"gifsicle failed for '{source}' (rc={result.returncode}): {tail}")
        raise EngineProcessException(
            f"gifsicle failed for '{source}' with exit code {result.returncode}",
            returncode=result.returncode,
            stderr=tail,
        )
    logger.debug(f"Animated GIF written to '{target}'")
