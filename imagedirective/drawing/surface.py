"""Drawing backend contract and its Pillow implementation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol

from PIL import Image, ImageOps

from imagedirective.utils.image_utils import RGBA, TRANSPARENT


class PixelFormat(str, Enum):
    """Pixel layouts a surface can be allocated with."""

    RGBA = "RGBA"
    RGB = "RGB"


class Interpolation(str, Enum):
    """Resampling filters understood by the backend."""

    NEAREST = "nearest"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"
    LANCZOS = "lanczos"


class EdgeMode(str, Enum):
    """How samples beyond the source border are produced.

    ``CLAMP`` leaves it to Pillow, which renormalises filter weights at the
    border. ``MIRROR`` reflects the border pixels before resampling.
    """

    CLAMP = "clamp"
    MIRROR = "mirror"


class Smoothing(str, Enum):
    """Smoothing policy applied while compositing."""

    NONE = "none"
    ANTIALIAS = "antialias"


@dataclass(frozen=True, slots=True)
class Rectangle:
    """Axis aligned rectangle in pixel space."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def as_box(self) -> tuple[int, int, int, int]:
        return self.x, self.y, self.right, self.bottom


class DrawingBackend(Protocol):
    """Opaque 2D drawing surface provider used by the geometry engine."""

    def allocate(
        self,
        width: int,
        height: int,
        pixel_format: PixelFormat = PixelFormat.RGBA,
        background: RGBA = TRANSPARENT,
    ) -> Any:
        ...

    def draw(
        self,
        surface: Any,
        destination: Rectangle,
        source: Any,
        source_rect: Rectangle,
        interpolation: Interpolation = Interpolation.BICUBIC,
        edge_mode: EdgeMode = EdgeMode.MIRROR,
        smoothing: Smoothing = Smoothing.NONE,
    ) -> None:
        ...

    def dispose(self, surface: Any) -> None:
        ...


_RESAMPLING = {
    Interpolation.NEAREST: Image.Resampling.NEAREST,
    Interpolation.BILINEAR: Image.Resampling.BILINEAR,
    Interpolation.BICUBIC: Image.Resampling.BICUBIC,
    Interpolation.LANCZOS: Image.Resampling.LANCZOS,
}


def _mirror_pad(region: Image.Image, destination: Rectangle) -> tuple[Image.Image, tuple[int, int, int, int]]:
    """Surround ``region`` with mirrored borders wide enough for the filter.

    Returns the padded image and the box of the original pixels inside it.
    """
    width, height = region.size
    # Lanczos reaches three source pixels, scaled up when shrinking.
    scale = max(1.0, width / destination.width, height / destination.height)
    margin = math.ceil(3 * scale) + 1
    margin_x = min(margin, width)
    margin_y = min(margin, height)

    padded = Image.new(region.mode, (width + 2 * margin_x, height + 2 * margin_y))
    padded.paste(region, (margin_x, margin_y))
    padded.paste(ImageOps.mirror(region.crop((0, 0, margin_x, height))), (0, margin_y))
    padded.paste(ImageOps.mirror(region.crop((width - margin_x, 0, width, height))), (margin_x + width, margin_y))

    top = padded.crop((0, margin_y, padded.width, 2 * margin_y))
    bottom = padded.crop((0, height, padded.width, margin_y + height))
    padded.paste(ImageOps.flip(top), (0, 0))
    padded.paste(ImageOps.flip(bottom), (0, margin_y + height))
    return padded, (margin_x, margin_y, margin_x + width, margin_y + height)


class PillowDrawingBackend:
    """Backend compositing ``PIL.Image`` surfaces."""

    def __init__(self, reducing_gap: Optional[float] = 3.0) -> None:
        self.reducing_gap = reducing_gap

    def allocate(
        self,
        width: int,
        height: int,
        pixel_format: PixelFormat = PixelFormat.RGBA,
        background: RGBA = TRANSPARENT,
    ) -> Image.Image:
        if width <= 0 or height <= 0:
            raise ValueError(f"Cannot allocate a {width}x{height} surface")
        color = background if pixel_format is PixelFormat.RGBA else background[:3]
        return Image.new(pixel_format.value, (width, height), color)

    def draw(
        self,
        surface: Image.Image,
        destination: Rectangle,
        source: Image.Image,
        source_rect: Rectangle,
        interpolation: Interpolation = Interpolation.BICUBIC,
        edge_mode: EdgeMode = EdgeMode.MIRROR,
        smoothing: Smoothing = Smoothing.NONE,
    ) -> None:
        if destination.width <= 0 or destination.height <= 0:
            return

        region = source
        if source_rect.as_box() != (0, 0, source.width, source.height):
            region = source.crop(source_rect.as_box())
        if region.mode != "RGBA":
            region = region.convert("RGBA")

        reducing_gap = None if smoothing is Smoothing.ANTIALIAS else self.reducing_gap
        box = None
        if edge_mode is EdgeMode.MIRROR:
            region, box = _mirror_pad(region, destination)
        scaled = region.resize(
            (destination.width, destination.height),
            resample=_RESAMPLING[interpolation],
            box=box,
            reducing_gap=reducing_gap,
        )

        layer = Image.new("RGBA", surface.size, TRANSPARENT)
        layer.paste(scaled, (destination.x, destination.y))
        if surface.mode == "RGBA":
            surface.alpha_composite(layer)
        else:
            surface.paste(layer, (0, 0), layer)

    def dispose(self, surface: Image.Image) -> None:
        surface.close()
