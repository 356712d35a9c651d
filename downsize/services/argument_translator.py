"""
Translates `ConversionOptions` into engine invocations.

Apart from logging, every function here is pure: it looks only at its
arguments and the constants in `downsize.config`, and returns either the ordered argument list for an
external tool (ffmpeg, gifsicle) or an `ImagePlan`, the ordered list of steps
the Pillow engine performs. Nothing is executed here.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger

from ..config.image import (
    DEFAULT_QUALITY,
    DEFAULT_WATERMARK_ANCHOR,
    FIRST_FRAME_SUFFIX,
    GIF_FILE,
    WATERMARK_ANCHORS,
)
from ..config.video import (
    DEFAULT_FRAME_RATE,
    DEFAULT_VIDEO_BITRATE,
    DEFAULT_VIDEO_FORMAT,
    DEINTERLACE_FILTER,
    FASTSTART_FORMATS,
    INTERLACED_EXTENSIONS,
    INTERLACED_QUALITY_SCALE,
    STILL_FRAME_OFFSET,
    VIDEO_CODEC_ARGS,
    VIDEO_CONTAINERS,
    VIDEO_QUALITY_CRF,
)
from ..domain.options import ConversionOptions

RESIZE_COVER = "cover"
RESIZE_MAX_HEIGHT = "max-height"
RESIZE_MAX_WIDTH = "max-width"


@dataclass(frozen=True)
class ResizeStep:
    mode: str
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(frozen=True)
class WatermarkStep:
    file: Path
    anchor: str


@dataclass(frozen=True)
class ImagePlan:
    """
    The ordered processing steps for one image conversion.

    Steps run in this order: load `source` (honouring a `[index]` frame
    suffix), auto-orient, watermark, resize, post-processing directives, then
    write with `quality`.

    When `animated` is True the conversion is handed to gifsicle and every
    other step is left empty.
    """

    source: str
    animated: bool = False
    auto_orient: bool = True
    watermark: Optional[WatermarkStep] = None
    resize: Optional[ResizeStep] = None
    directives: Tuple[str, ...] = field(default_factory=tuple)
    quality: Optional[int] = None
    output_format: Optional[str] = None


def is_gif(source) -> bool:
    return GIF_FILE.search(str(source)) is not None


def is_interlaced(source) -> bool:
    return Path(source).suffix.lower() in INTERLACED_EXTENSIONS


def resolve_watermark_anchor(position: Optional[str]) -> str:
    """Maps a compass position (case-sensitive) to an anchor, defaulting to bottom-right."""
    if position is None:
        return DEFAULT_WATERMARK_ANCHOR
    return WATERMARK_ANCHORS.get(position, DEFAULT_WATERMARK_ANCHOR)


def resize_step_for(options: ConversionOptions) -> Optional[ResizeStep]:
    """Applies the sizing policy: crop to both dimensions, else max height, else max width."""
    if options.width is not None and options.height is not None:
        return ResizeStep(RESIZE_COVER, options.width, options.height)
    if options.height is not None:
        return ResizeStep(RESIZE_MAX_HEIGHT, height=options.height)
    if options.width is not None:
        return ResizeStep(RESIZE_MAX_WIDTH, width=options.width)
    return None


def build_image_plan(source, options: ConversionOptions) -> ImagePlan:
    """
    Builds the Pillow processing plan for an image conversion.

    GIF sources are either handed to the animated path as a whole or reduced
    to their first frame. A watermark is only planned when the image is not
    being cropped.
    """
    source_ref = str(source)

    if is_gif(source_ref):
        if options.animated:
            return ImagePlan(source=source_ref, animated=True, auto_orient=False)
        source_ref += FIRST_FRAME_SUFFIX

    watermark = None
    if options.watermark is not None and not options.crops:
        watermark = WatermarkStep(
            file=Path(options.watermark.file),
            anchor=resolve_watermark_anchor(options.watermark.position),
        )

    return ImagePlan(
        source=source_ref,
        watermark=watermark,
        resize=resize_step_for(options),
        directives=tuple(options.args),
        quality=DEFAULT_QUALITY if options.quality is None else options.quality,
        output_format=options.format,
    )


def _scale_filter(options: ConversionOptions) -> Optional[str]:
    # Max-dimension scaling; -2 keeps the aspect ratio with an even dimension.
    if options.width is not None and options.height is not None:
        return (
            f"scale='min({options.width},iw)':'min({options.height},ih)'"
            ":force_original_aspect_ratio=decrease:force_divisible_by=2"
        )
    if options.height is not None:
        return f"scale=-2:'min({options.height},ih)'"
    if options.width is not None:
        return f"scale='min({options.width},iw)':-2"
    return None


def _quality_to_crf(quality: int, worst: int, best: int) -> int:
    return round(worst + (best - worst) * quality / 100)


def _rate_control_args(source, video_format: str, interlaced: bool, options: ConversionOptions) -> List[str]:
    if interlaced:
        if options.bitrate or options.quality is not None:
            logger.warning(
                f"'{source}' is interlaced and is encoded at fixed quality scale {INTERLACED_QUALITY_SCALE}; "
                f"ignoring bitrate={options.bitrate!r}, quality={options.quality!r}"
            )
        return ["-q:v", INTERLACED_QUALITY_SCALE]

    if options.bitrate:
        if options.quality is not None:
            logger.debug(f"Bitrate {options.bitrate} takes precedence over quality {options.quality} for '{source}'")
        return ["-b:v", options.bitrate]

    if options.quality is not None:
        if video_format in VIDEO_QUALITY_CRF:
            worst, best, extra = VIDEO_QUALITY_CRF[video_format]
            return ["-crf", str(_quality_to_crf(options.quality, worst, best))] + extra
        logger.debug(f"No constant-quality mode for format '{video_format}'; using the default bitrate")

    return ["-b:v", DEFAULT_VIDEO_BITRATE]


def build_video_args(source, target, options: ConversionOptions) -> List[str]:
    """
    Builds the ordered ffmpeg arguments for transcoding `source` to `target`.

    Interlaced (.mts) sources are deinterlaced and encoded with a fixed
    quality scale. Otherwise an explicit bitrate wins, then an explicit
    quality (mapped to a CRF for formats that support it), then the default
    bitrate.
    """
    video_format = (options.format or DEFAULT_VIDEO_FORMAT).lower()
    interlaced = is_interlaced(source)

    args = ["-i", str(source)]
    args += VIDEO_CODEC_ARGS.get(video_format, [])

    filters = []
    if interlaced:
        filters.append(DEINTERLACE_FILTER)
    scale = _scale_filter(options)
    if scale:
        filters.append(scale)
    if filters:
        args += ["-vf", ",".join(filters)]

    args += _rate_control_args(source, video_format, interlaced, options)

    args += ["-r", str(DEFAULT_FRAME_RATE)]
    if video_format in FASTSTART_FORMATS:
        args += ["-movflags", "+faststart"]
    args += ["-f", VIDEO_CONTAINERS.get(video_format, video_format)]
    args += ["-y", str(target)]
    return args


def build_frame_args(source, target, offset: Optional[str] = STILL_FRAME_OFFSET) -> List[str]:
    """Builds the ffmpeg arguments extracting a single frame, optionally seeking to `offset` seconds first."""
    args = ["-ss", offset] if offset is not None else []
    return args + ["-i", str(source), "-vframes", "1", "-y", str(target)]


def _cover_crop(source_size: Tuple[int, int], width: int, height: int) -> str:
    src_w, src_h = source_size
    scale = max(width / src_w, height / src_h)
    crop_w = min(src_w, max(1, round(width / scale)))
    crop_h = min(src_h, max(1, round(height / scale)))
    x = (src_w - crop_w) // 2
    y = (src_h - crop_h) // 2
    return f"{x},{y}+{crop_w}x{crop_h}"


def build_gifsicle_args(source, target, options: ConversionOptions, source_size: Optional[Tuple[int, int]] = None) -> List[str]:
    """
    Builds the gifsicle arguments for an animated GIF conversion.

    Cropping to both dimensions needs the GIF's logical screen size
    (`source_size`) to compute a centred crop; without it the frames are
    only fitted inside the box.
    """
    args = ["--no-warnings"]
    if options.crops:
        if source_size:
            args += ["--crop", _cover_crop(source_size, options.width, options.height)]
            args += ["--resize", f"{options.width}x{options.height}"]
        else:
            args += ["--resize-fit", f"{options.width}x{options.height}"]
    elif options.height is not None:
        args += ["--resize-fit-height", str(options.height)]
    elif options.width is not None:
        args += ["--resize-fit-width", str(options.width)]
    args += ["--output", str(target), str(source)]
    return args
