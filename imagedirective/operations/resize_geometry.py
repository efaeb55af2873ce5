"""Geometry for the resize operation.

Everything here is pure arithmetic on sizes: :func:`compute_resize_plan` turns
a source size and :class:`ResizeParameters` into the canvas size and the
rectangle the source is drawn into, or a reason why the resize must leave the
image untouched.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple

from imagedirective.drawing.surface import Rectangle, Smoothing
from imagedirective.utils.image_utils import RGBA, TRANSPARENT


class ResizeMode(str, Enum):
    """How the source aspect ratio is reconciled with the requested box."""

    PAD = "pad"
    STRETCH = "stretch"
    CROP = "crop"
    MAX = "max"


class AnchorPosition(str, Enum):
    """Reference point used to place the crop window."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


@dataclass(frozen=True, slots=True)
class ResizeParameters:
    """Typed parameters for one resize invocation.

    A zero ``width`` or ``height`` means the dimension is derived from the
    source aspect ratio. ``center`` holds ``(x, y)`` fractions of the source
    and, when present, places the crop window instead of ``anchor``.

    ``center=a,b`` is read as ``x=a, y=b``. ImageProcessor's ``Resize`` read
    the same pair as ``(y, x)``, so URLs ported from it need the values
    swapped.
    """

    width: int = 0
    height: int = 0
    mode: ResizeMode = ResizeMode.PAD
    anchor: AnchorPosition = AnchorPosition.CENTER
    background: RGBA = TRANSPARENT
    upscale: bool = True
    center: Optional[Tuple[float, float]] = None


@dataclass(frozen=True, slots=True)
class SizeRestriction:
    """Allowed output size; a zero dimension turns the other into a wildcard."""

    width: int
    height: int

    def matches(self, width: int, height: int) -> bool:
        if self.width == 0 or self.height == 0:
            value = self.width or self.height
            return value > 0 and value in (width, height)
        return self.width == width and self.height == height


@dataclass(frozen=True, slots=True)
class ResizeLimits:
    """Settings-derived bounds. Zero maxima mean unbounded."""

    max_width: int = 0
    max_height: int = 0
    restrictions: Tuple[SizeRestriction, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class ResizePlan:
    """Canvas size and destination rectangle, or the reason nothing is drawn."""

    width: int
    height: int
    destination: Rectangle
    smoothing: Smoothing = Smoothing.NONE
    skip_reason: Optional[str] = None

    @property
    def is_noop(self) -> bool:
        return self.skip_reason is not None


def _ceil(value: float) -> int:
    """Round up, ignoring float noise such as ``870 * (150 / 290)``."""
    return math.ceil(round(value, 9))


def _crop_offset(
    target: int,
    source: int,
    ratio: float,
    coordinate: Optional[float],
    anchor: AnchorPosition,
    leading: AnchorPosition,
    trailing: AnchorPosition,
) -> int:
    """Offset of the scaled source along the axis that overflows the target."""
    lowest = target - _ceil(source * ratio)

    if coordinate is not None:
        offset = int(-(ratio * source) * coordinate) + target // 2
        return max(lowest, min(0, offset))

    if anchor is leading:
        return 0
    if anchor is trailing:
        return lowest
    return int((target - source * ratio) / 2)


def matches_restrictions(width: int, height: int, restrictions: Sequence[SizeRestriction]) -> bool:
    """Return True when no restrictions apply or any restriction accepts the size."""
    if not restrictions:
        return True
    return any(restriction.matches(width, height) for restriction in restrictions)


def compute_resize_plan(
    source_width: int,
    source_height: int,
    parameters: ResizeParameters,
    limits: Optional[ResizeLimits] = None,
) -> ResizePlan:
    """Compute where and how large the source is drawn on the new canvas."""
    limits = limits or ResizeLimits()
    width = max(0, parameters.width)
    height = max(0, parameters.height)
    mode = parameters.mode

    destination_x = 0
    destination_y = 0
    destination_width = width
    destination_height = height

    percent_height = abs(height / source_height) if source_height else 0.0
    percent_width = abs(width / source_width) if source_width else 0.0

    if mode is ResizeMode.PAD and width > 0 and height > 0:
        if percent_height < percent_width:
            ratio = percent_height
            destination_x = int((width - source_width * ratio) / 2)
            destination_width = _ceil(source_width * percent_height)
        else:
            ratio = percent_width
            destination_y = int((height - source_height * ratio) / 2)
            destination_height = _ceil(source_height * percent_width)

    if mode is ResizeMode.CROP and width > 0 and height > 0:
        center = parameters.center
        if percent_height < percent_width:
            ratio = percent_width
            destination_y = _crop_offset(
                height,
                source_height,
                ratio,
                center[1] if center else None,
                parameters.anchor,
                AnchorPosition.TOP,
                AnchorPosition.BOTTOM,
            )
            destination_height = _ceil(source_height * percent_width)
        else:
            ratio = percent_height
            destination_x = _crop_offset(
                width,
                source_width,
                ratio,
                center[0] if center else None,
                parameters.anchor,
                AnchorPosition.LEFT,
                AnchorPosition.RIGHT,
            )
            destination_width = _ceil(source_width * percent_height)

    if mode is ResizeMode.MAX and width > 0 and height > 0 and source_width > 0 and source_height > 0:
        if source_width > width or source_height > height:
            if source_height / source_width < height / width:
                height = 0
            else:
                width = 0

    # A missing dimension keeps the source aspect ratio.
    if height == 0:
        destination_height = _ceil(source_height * percent_width)
        height = destination_height

    if width == 0:
        destination_width = _ceil(source_width * percent_height)
        width = destination_width

    smoothing = Smoothing.NONE
    if source_width < destination_width and source_height < destination_height:
        smoothing = Smoothing.ANTIALIAS

    destination = Rectangle(destination_x, destination_y, destination_width, destination_height)

    def plan(reason: Optional[str] = None) -> ResizePlan:
        return ResizePlan(width, height, destination, smoothing, reason)

    if not matches_restrictions(width, height, limits.restrictions):
        return plan(f"{width}x{height} is not an allowed size")

    if (width > source_width or height > source_height) and not parameters.upscale and mode is not ResizeMode.STRETCH:
        return plan(f"upscaling {source_width}x{source_height} to {width}x{height} is disabled")

    max_width = limits.max_width if limits.max_width > 0 else math.inf
    max_height = limits.max_height if limits.max_height > 0 else math.inf
    if width <= 0 or height <= 0 or width > max_width or height > max_height:
        return plan(f"{width}x{height} is outside the allowed bounds")

    return plan()
