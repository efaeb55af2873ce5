"""Rotate operation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from PIL import Image

from imagedirective.operations.base import ImageOperation, OperationContext, OperationResult
from imagedirective.utils.image_utils import TRANSPARENT, to_float_list


@dataclass(frozen=True, slots=True)
class RotateParameters:
    """Clockwise rotation in degrees."""

    angle: float = 0.0


class Rotate(ImageOperation[RotateParameters]):
    """Rotates an image clockwise, growing the canvas to fit the result."""

    pattern = re.compile(r"rotate=-?\d+(\.\d+)?")

    def parse(self, matched: str) -> RotateParameters:
        values = to_float_list(matched)
        return RotateParameters(angle=values[0] if values else 0.0)

    def apply(self, image: Any, parameters: RotateParameters, context: OperationContext) -> OperationResult:
        angle = parameters.angle % 360
        if angle == 0:
            return self.skip(image, "rotation is a multiple of 360 degrees")

        source = image if image.mode == "RGBA" else image.convert("RGBA")
        rotated = source.rotate(
            -angle,
            resample=Image.Resampling.BICUBIC,
            expand=True,
            fillcolor=TRANSPARENT,
        )
        if source is not image:
            context.backend.dispose(source)
        return OperationResult(image=rotated)
