"""
Defines the configuration record passed to every conversion entry point.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, List, Mapping, Optional

from .exceptions import InvalidOptionsException


@dataclass
class WatermarkOptions:
    """
    An overlay image composited onto converted images.

    Attributes:
        file (Path): Path of the overlay image.
        position (str | None): One of the compass names `NorthWest`, `North`,
            `NorthEast`, `West`, `East`, `SouthWest`, `South`, `SouthEast`, or
            `Repeat` to tile the overlay. Matching is case-sensitive; anything
            else falls back to the bottom-right corner.
    """

    file: Path
    position: Optional[str] = None

    def __post_init__(self):
        self.file = Path(self.file)


@dataclass
class ConversionOptions:
    """
    Declarative options for an image, video or still-frame conversion.

    No field is required; a field left unset means the engine default applies.

    Attributes:
        width (int | None): Target width in pixels.
        height (int | None): Target height in pixels. With `width` set as well,
            images are cropped to exactly width x height.
        animated (bool): For GIF sources, keep all frames (gifsicle path)
            instead of reading only the first frame.
        watermark (WatermarkOptions | None): Overlay applied to images that
            are not cropped.
        quality (int | None): Compression quality 0-100. Images are written at
            90 when unset; videos switch from the bitrate to constant-quality
            (CRF) encoding when it is set.
        format (str | None): Output format or container (`jpg`, `png`, `mp4`,
            `webm`, ...).
        bitrate (str | None): Video bitrate, e.g. `"100k"`.
        args (list[str]): Post-processing directives applied to images after
            sizing, e.g. `["-sharpen 1", "-modulate 110,120"]`.
    """

    width: Optional[int] = None
    height: Optional[int] = None
    animated: bool = False
    watermark: Optional[WatermarkOptions] = None
    quality: Optional[int] = None
    format: Optional[str] = None
    bitrate: Optional[str] = None
    args: List[str] = field(default_factory=list)

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if value is not None and (not isinstance(value, int) or isinstance(value, bool) or value <= 0):
                raise InvalidOptionsException(f"{name} must be a positive integer, got {value!r}")
        if self.quality is not None and (
            not isinstance(self.quality, int) or isinstance(self.quality, bool) or not 0 <= self.quality <= 100
        ):
            raise InvalidOptionsException(f"quality must be an integer between 0 and 100, got {self.quality!r}")
        if isinstance(self.watermark, Mapping):
            self.watermark = _watermark_from_mapping(self.watermark)
        if isinstance(self.args, str):
            self.args = [self.args]
        self.args = list(self.args or [])

    @property
    def crops(self) -> bool:
        """True when both dimensions are set, i.e. the image is cropped to fit."""
        return self.width is not None and self.height is not None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ConversionOptions":
        """
        Builds options from a plain mapping, e.g. parsed YAML or JSON.

        Args:
            data: Keys named after the dataclass fields. `None` or an empty
                  mapping gives the defaults.

        Raises:
            InvalidOptionsException: If a key is unknown or a value is invalid.
        """
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidOptionsException(f"Unknown conversion option(s): {', '.join(unknown)}")
        return cls(**dict(data))


def _watermark_from_mapping(data: Mapping[str, Any]) -> WatermarkOptions:
    if not data.get("file"):
        raise InvalidOptionsException("watermark requires a 'file' entry")
    return WatermarkOptions(file=data["file"], position=data.get("position"))


def coerce_options(options: Optional[Any]) -> ConversionOptions:
    """Accepts `None`, a mapping or a `ConversionOptions` and returns the latter."""
    if options is None:
        return ConversionOptions()
    if isinstance(options, ConversionOptions):
        return options
    if isinstance(options, Mapping):
        return ConversionOptions.from_dict(options)
    raise InvalidOptionsException(f"Unsupported options type: {type(options).__name__}")
