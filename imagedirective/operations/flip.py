"""Flip operation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from PIL import Image

from imagedirective.operations.base import ImageOperation, OperationContext, OperationResult


class FlipDirection(str, Enum):
    """Axis to mirror the image along."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    BOTH = "both"


_TRANSPOSE = {
    FlipDirection.HORIZONTAL: Image.Transpose.FLIP_LEFT_RIGHT,
    FlipDirection.VERTICAL: Image.Transpose.FLIP_TOP_BOTTOM,
    FlipDirection.BOTH: Image.Transpose.ROTATE_180,
}


@dataclass(frozen=True, slots=True)
class FlipParameters:
    direction: FlipDirection = FlipDirection.HORIZONTAL


class Flip(ImageOperation[FlipParameters]):
    """Mirrors an image horizontally, vertically or both."""

    pattern = re.compile(r"flip=(horizontal|vertical|both)")

    def parse(self, matched: str) -> FlipParameters:
        match = self.pattern.search(matched)
        if match is None:
            return FlipParameters()
        return FlipParameters(direction=FlipDirection(match.group(1)))

    def apply(self, image: Any, parameters: FlipParameters, context: OperationContext) -> OperationResult:
        return OperationResult(image=image.transpose(_TRANSPOSE[parameters.direction]))
