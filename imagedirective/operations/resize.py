"""Resize operation: parses size/mode/anchor tokens and draws via the backend."""

from __future__ import annotations

import logging
import re
from typing import Any, List, Mapping, Optional

from imagedirective.drawing.surface import EdgeMode, Interpolation, PixelFormat, Rectangle
from imagedirective.operations.base import ImageOperation, OperationContext, OperationResult, OperationStatus
from imagedirective.operations.resize_geometry import (
    AnchorPosition,
    ResizeLimits,
    ResizeMode,
    ResizeParameters,
    SizeRestriction,
    compute_resize_plan,
)
from imagedirective.utils.image_utils import TRANSPARENT, parse_color, to_float_list

logger = logging.getLogger(__name__)

RESIZE_PATTERN = re.compile(
    r"((width|height)=\d+)"
    r"|(mode=(pad|stretch|crop|max))"
    r"|(anchor=(top|bottom|left|right|center))"
    r"|(center=-?\d+(\.\d+)?,-?\d+(\.\d+)?)"
    r"|(bgcolor=(transparent|\d+,\d+,\d+,\d+|([0-9a-fA-F]{3}){1,2}))"
    r"|(upscale=false)"
)

SIZE_PATTERN = re.compile(r"(width|height)=(\d+)")
MODE_PATTERN = re.compile(r"mode=(pad|stretch|crop|max)")
ANCHOR_PATTERN = re.compile(r"anchor=(top|bottom|left|right|center)")
CENTER_PATTERN = re.compile(r"center=(-?\d+(?:\.\d+)?,-?\d+(?:\.\d+)?)")
COLOR_PATTERN = re.compile(r"bgcolor=(transparent|\d+,\d+,\d+,\d+|(?:[0-9a-fA-F]{3}){1,2})")
UPSCALE_PATTERN = re.compile(r"upscale=false")


def parse_size(text: str) -> tuple[int, int]:
    """Return ``(width, height)``; the first token for each dimension wins."""
    values: dict[str, int] = {}
    for match in SIZE_PATTERN.finditer(text):
        values.setdefault(match.group(1), int(match.group(2)))
    return values.get("width", 0), values.get("height", 0)


def parse_mode(text: str) -> ResizeMode:
    match = MODE_PATTERN.search(text)
    return ResizeMode(match.group(1)) if match else ResizeMode.PAD


def parse_anchor(text: str) -> AnchorPosition:
    match = ANCHOR_PATTERN.search(text)
    return AnchorPosition(match.group(1)) if match else AnchorPosition.CENTER


def parse_center(text: str) -> Optional[tuple[float, float]]:
    coordinates: List[float] = []
    for match in CENTER_PATTERN.finditer(text):
        coordinates = to_float_list(match.group(1))
    if len(coordinates) < 2:
        return None
    return coordinates[0], coordinates[1]


def parse_resize_parameters(text: str) -> ResizeParameters:
    """Build :class:`ResizeParameters` from the merged resize tokens."""
    width, height = parse_size(text)
    color_match = COLOR_PATTERN.search(text)
    return ResizeParameters(
        width=width,
        height=height,
        mode=parse_mode(text),
        anchor=parse_anchor(text),
        background=parse_color(color_match.group(1)) if color_match else TRANSPARENT,
        upscale=UPSCALE_PATTERN.search(text) is None,
        center=parse_center(text),
    )


def parse_restrictions(value: Optional[str]) -> tuple[SizeRestriction, ...]:
    """Parse a ``RestrictTo`` value such as ``width=100height=200,width=300``."""
    if not value or not value.strip():
        return ()
    restrictions: List[SizeRestriction] = []
    for entry in value.split(","):
        if not SIZE_PATTERN.search(entry):
            continue
        width, height = parse_size(entry)
        restrictions.append(SizeRestriction(width, height))
    return tuple(restrictions)


def _setting_int(settings: Mapping[str, str], key: str) -> int:
    try:
        return max(0, int(settings.get(key, "0").strip()))
    except ValueError:
        return 0


class Resize(ImageOperation[ResizeParameters]):
    """Resizes an image to the requested dimensions."""

    pattern = RESIZE_PATTERN

    def __init__(self, settings: Optional[Mapping[str, str]] = None) -> None:
        super().__init__(settings)
        self.limits = ResizeLimits(
            max_width=_setting_int(self.settings, "MaxWidth"),
            max_height=_setting_int(self.settings, "MaxHeight"),
            restrictions=parse_restrictions(self.settings.get("RestrictTo")),
        )

    def parse(self, matched: str) -> ResizeParameters:
        return parse_resize_parameters(matched)

    def apply(self, image: Any, parameters: ResizeParameters, context: OperationContext) -> OperationResult:
        source_width, source_height = image.size
        plan = compute_resize_plan(source_width, source_height, parameters, self.limits)
        if plan.is_noop:
            logger.debug("Resize skipped: %s", plan.skip_reason)
            return self.skip(image, plan.skip_reason or "")

        backend = context.backend
        surface = None
        try:
            surface = backend.allocate(plan.width, plan.height, PixelFormat.RGBA, parameters.background)
            backend.draw(
                surface,
                plan.destination,
                image,
                Rectangle(0, 0, source_width, source_height),
                interpolation=Interpolation.BICUBIC,
                edge_mode=EdgeMode.MIRROR,
                smoothing=plan.smoothing,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("Resize to %sx%s failed; keeping the original image", plan.width, plan.height)
            if surface is not None:
                backend.dispose(surface)
            return OperationResult(image=image, status=OperationStatus.FAILED, reason=str(exc))

        return OperationResult(image=surface)
