"""
Executes an `ImagePlan` with Pillow.

The plan is produced by `argument_translator.build_image_plan`; this module
performs the steps in order (load, auto-orient, watermark, resize,
post-processing directives, write) and maps Pillow's failures onto the
application's exceptions.
"""

import re
from pathlib import Path
from typing import Optional, Tuple

from loguru import logger
from PIL import Image, ImageOps, UnidentifiedImageError

from ..config.image import (
    ANCHOR_OFFSETS,
    ANCHOR_TILE,
    DEFAULT_QUALITY,
    DEFAULT_WATERMARK_ANCHOR,
    FLATTEN_BACKGROUND_RGBA,
    FORMAT_ALIASES,
    FORMATS_WITHOUT_ALPHA,
    QUALITY_FORMATS,
)
from ..domain.exceptions import (
    EngineInvocationException,
    FilesystemException,
    ImageReadException,
)
from .argument_translator import (
    RESIZE_COVER,
    RESIZE_MAX_HEIGHT,
    RESIZE_MAX_WIDTH,
    ImagePlan,
    ResizeStep,
    WatermarkStep,
)
from .post_processing import apply_directives

_FRAME_REFERENCE = re.compile(r"^(?P<path>.+)\[(?P<index>\d+)\]$")


def split_frame_reference(source_ref: str) -> Tuple[Path, Optional[int]]:
    """Splits `photo.gif[0]` into the path and the frame index (None when absent)."""
    match = _FRAME_REFERENCE.match(str(source_ref))
    if match:
        return Path(match.group("path")), int(match.group("index"))
    return Path(source_ref), None


def _normalize_mode(image: Image.Image) -> Image.Image:
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        return image.convert("RGBA")
    if image.mode not in ("RGB", "L"):
        return image.convert("RGB")
    return image


def load_image(source_ref: str, auto_orient: bool = True) -> Image.Image:
    """
    Loads an image fully into memory.

    Args:
        source_ref: A path, optionally suffixed with `[index]` to select a
                    frame of a multi-frame image.
        auto_orient: Apply the EXIF orientation and drop the orientation tag.

    Raises:
        ImageReadException: If the file is missing, cannot be decoded, or has
            no frame at the requested index.
    """
    path, frame = split_frame_reference(source_ref)
    try:
        with Image.open(path) as opened:
            if frame is not None:
                opened.seek(frame)
            opened.load()
            image = ImageOps.exif_transpose(opened) if auto_orient else opened.copy()
    except (FileNotFoundError, UnidentifiedImageError, EOFError, OSError) as e:
        logger.error(f"Could not read image '{source_ref}': {e}")
        raise ImageReadException(f"Could not read image '{source_ref}': {e}") from e

    return _normalize_mode(image)


def overlay(image: Image.Image, watermark: WatermarkStep) -> Image.Image:
    """Composites the watermark file onto the image at its anchor, or tiled over the whole image."""
    mark = load_image(str(watermark.file), auto_orient=False).convert("RGBA")
    original_mode = image.mode
    base = image.convert("RGBA")
    width, height = base.size
    mark_w, mark_h = mark.size

    if watermark.anchor == ANCHOR_TILE:
        for top in range(0, height, mark_h):
            for left in range(0, width, mark_w):
                tile = mark.crop((0, 0, min(mark_w, width - left), min(mark_h, height - top)))
                base.alpha_composite(tile, (left, top))
    else:
        fx, fy = ANCHOR_OFFSETS.get(watermark.anchor, ANCHOR_OFFSETS[DEFAULT_WATERMARK_ANCHOR])
        left = max(0, int((width - mark_w) * fx))
        top = max(0, int((height - mark_h) * fy))
        base.alpha_composite(mark.crop((0, 0, min(mark_w, width - left), min(mark_h, height - top))), (left, top))

    if original_mode != "RGBA":
        return base.convert(original_mode)
    return base


def resize(image: Image.Image, step: ResizeStep) -> Image.Image:
    """
    Resizes according to the step's mode.

    `cover` scales to fill and centre-crops to exactly width x height; the
    max modes only ever shrink, keeping the aspect ratio.
    """
    if step.mode == RESIZE_COVER:
        return ImageOps.fit(image, (step.width, step.height), method=Image.Resampling.LANCZOS, centering=(0.5, 0.5))

    src_w, src_h = image.size
    if step.mode == RESIZE_MAX_HEIGHT and src_h > step.height:
        new_size = (max(1, round(src_w * step.height / src_h)), step.height)
    elif step.mode == RESIZE_MAX_WIDTH and src_w > step.width:
        new_size = (step.width, max(1, round(src_h * step.width / src_w)))
    else:
        return image
    return image.resize(new_size, resample=Image.Resampling.LANCZOS)


def resolve_output_format(target: Path, requested: Optional[str] = None) -> str:
    """
    Determines the Pillow format name used to write `target`.

    Raises:
        EngineInvocationException: If the format is not supported by Pillow.
    """
    if requested:
        fmt = FORMAT_ALIASES.get(requested.lower(), requested.upper())
        if fmt not in Image.registered_extensions().values():
            raise EngineInvocationException(f"Unsupported image format: {requested}")
        return fmt

    fmt = Image.registered_extensions().get(target.suffix.lower())
    if fmt is None:
        raise EngineInvocationException(f"Cannot determine image format from '{target.name}'")
    return fmt


def _prepare_for_format(image: Image.Image, fmt: str) -> Image.Image:
    if fmt in FORMATS_WITHOUT_ALPHA:
        if "A" in image.getbands():
            background = Image.new("RGBA", image.size, FLATTEN_BACKGROUND_RGBA)
            return Image.alpha_composite(background, image.convert("RGBA")).convert("RGB")
        if image.mode not in ("RGB", "L"):
            return image.convert("RGB")
    return image


def save_image(image: Image.Image, target: Path, fmt: str, quality: Optional[int]) -> None:
    """
    Writes the image, passing `quality` to formats that support it.

    Raises:
        EngineInvocationException: If Pillow cannot encode the image in `fmt`.
        FilesystemException: If the file cannot be written.
    """
    params = {}
    if fmt in QUALITY_FORMATS:
        params["quality"] = DEFAULT_QUALITY if quality is None else quality

    image = _prepare_for_format(image, fmt)
    try:
        image.save(target, format=fmt, **params)
    except (KeyError, ValueError) as e:
        logger.error(f"Image engine could not encode '{target}' as {fmt}: {e}")
        raise EngineInvocationException(f"Could not encode '{target}' as {fmt}: {e}") from e
    except OSError as e:
        logger.error(f"Could not write '{target}': {e}")
        raise FilesystemException(f"Could not write '{target}': {e}") from e


def run_image_plan(plan: ImagePlan, target: Path) -> None:
    """Performs every step of a static image plan and writes the result to `target`."""
    if plan.animated:
        raise ValueError("Animated plans are handled by gifsicle, not the Pillow engine")

    # Resolved first so an unsupported target fails before any decoding work.
    fmt = resolve_output_format(target, plan.output_format)

    image = load_image(plan.source, auto_orient=plan.auto_orient)
    logger.debug(f"Loaded '{plan.source}' ({image.width}x{image.height}, {image.mode})")

    if plan.watermark is not None:
        image = overlay(image, plan.watermark)
    if plan.resize is not None:
        image = resize(image, plan.resize)
    if plan.directives:
        image = apply_directives(image, plan.directives)

    save_image(image, target, fmt, plan.quality)
