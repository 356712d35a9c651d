"""
Free-form post-processing directives applied to images after sizing.

A directive is a string of the form `-name [value]`, e.g. `-sharpen 2` or
`-modulate 110,120`. Each name is registered with a function that takes the
Pillow image and the raw value and returns the processed image. Directives are
applied in the order they appear in `ConversionOptions.args`.
"""

from typing import Callable, Dict, Iterable, Optional, Tuple

from loguru import logger
from PIL import Image, ImageEnhance, ImageFilter, ImageOps

from ..domain.exceptions import UnsupportedDirectiveException

DirectiveFunc = Callable[[Image.Image, Optional[str]], Image.Image]

_registry: Dict[str, DirectiveFunc] = {}


def register(name: str) -> Callable[[DirectiveFunc], DirectiveFunc]:
    """Decorator registering a directive function under `name` (without the leading dash)."""

    def decorator(func: DirectiveFunc) -> DirectiveFunc:
        _registry[name] = func
        return func

    return decorator


def parse_directive(directive: str) -> Tuple[str, Optional[str]]:
    """
    Splits a directive string into its name and optional value.

    Raises:
        UnsupportedDirectiveException: If the string is empty, does not start
            with a dash, or names an unregistered directive.
    """
    parts = directive.strip().split(None, 1)
    if not parts or not parts[0].startswith("-"):
        raise UnsupportedDirectiveException(f"Malformed directive: {directive!r}")
    name = parts[0].lstrip("-")
    value = parts[1].strip() if len(parts) > 1 else None
    if name not in _registry:
        raise UnsupportedDirectiveException(f"Unsupported directive: -{name}")
    return name, value


def apply_directives(image: Image.Image, directives: Iterable[str]) -> Image.Image:
    """Applies each directive to the image in order and returns the result."""
    for directive in directives:
        name, value = parse_directive(directive)
        logger.debug(f"Applying directive -{name} {value or ''}".rstrip())
        image = _registry[name](image, value)
    return image


def _number(name: str, value: Optional[str], default: Optional[float] = None) -> float:
    if value is None:
        if default is None:
            raise UnsupportedDirectiveException(f"-{name} requires a value")
        return default
    try:
        return float(value)
    except ValueError:
        raise UnsupportedDirectiveException(f"-{name}: invalid value {value!r}") from None


def _split_alpha(image: Image.Image) -> Tuple[Image.Image, Optional[Image.Image]]:
    if image.mode in ("RGBA", "LA"):
        return image.convert("RGB" if image.mode == "RGBA" else "L"), image.getchannel("A")
    if image.mode not in ("RGB", "L"):
        return image.convert("RGB"), None
    return image, None


def _with_alpha(image: Image.Image, alpha: Optional[Image.Image]) -> Image.Image:
    if alpha is None:
        return image
    image = image.convert("RGBA" if image.mode == "RGB" else "LA")
    image.putalpha(alpha)
    return image


@register("sharpen")
def sharpen(image: Image.Image, value: Optional[str]) -> Image.Image:
    radius = _number("sharpen", value, default=1.0)
    return image.filter(ImageFilter.UnsharpMask(radius=radius, percent=150, threshold=0))


@register("unsharp")
def unsharp(image: Image.Image, value: Optional[str]) -> Image.Image:
    # Geometry: radius[xsigma][+amount[+threshold]], amount and threshold as fractions.
    if not value:
        raise UnsupportedDirectiveException("-unsharp requires a value")
    geometry, *rest = value.split("+")
    radius_str, _, sigma_str = geometry.partition("x")
    try:
        radius = float(sigma_str or radius_str)
        amount = float(rest[0]) if rest else 1.0
        threshold = float(rest[1]) if len(rest) > 1 else 0.0
    except ValueError:
        raise UnsupportedDirectiveException(f"-unsharp: invalid value {value!r}") from None
    return image.filter(ImageFilter.UnsharpMask(
        radius=radius,
        percent=int(amount * 100),
        threshold=int(threshold * 255) if threshold <= 1 else int(threshold),
    ))


@register("blur")
def blur(image: Image.Image, value: Optional[str]) -> Image.Image:
    return image.filter(ImageFilter.GaussianBlur(radius=_number("blur", value, default=2.0)))


@register("modulate")
def modulate(image: Image.Image, value: Optional[str]) -> Image.Image:
    # brightness[,saturation] in percent; 100 leaves the channel unchanged.
    if not value:
        raise UnsupportedDirectiveException("-modulate requires a value")
    parts = value.split(",")
    brightness = _number("modulate", parts[0])
    image = ImageEnhance.Brightness(image).enhance(brightness / 100)
    if len(parts) > 1 and parts[1].strip():
        saturation = _number("modulate", parts[1])
        image = ImageEnhance.Color(image).enhance(saturation / 100)
    return image


@register("brightness")
def brightness(image: Image.Image, value: Optional[str]) -> Image.Image:
    return ImageEnhance.Brightness(image).enhance(_number("brightness", value) / 100)


@register("contrast")
def contrast(image: Image.Image, value: Optional[str]) -> Image.Image:
    return ImageEnhance.Contrast(image).enhance(_number("contrast", value) / 100)


@register("grayscale")
def grayscale(image: Image.Image, value: Optional[str]) -> Image.Image:
    return image.convert("LA" if "A" in image.getbands() else "L")


@register("equalize")
def equalize(image: Image.Image, value: Optional[str]) -> Image.Image:
    base, alpha = _split_alpha(image)
    return _with_alpha(ImageOps.equalize(base), alpha)


@register("normalize")
def normalize(image: Image.Image, value: Optional[str]) -> Image.Image:
    base, alpha = _split_alpha(image)
    return _with_alpha(ImageOps.autocontrast(base), alpha)


@register("flip")
def flip(image: Image.Image, value: Optional[str]) -> Image.Image:
    return ImageOps.flip(image)


@register("flop")
def flop(image: Image.Image, value: Optional[str]) -> Image.Image:
    return ImageOps.mirror(image)


@register("rotate")
def rotate(image: Image.Image, value: Optional[str]) -> Image.Image:
    # Positive angles rotate clockwise; Pillow rotates counter-clockwise.
    return image.rotate(-_number("rotate", value), expand=True)
