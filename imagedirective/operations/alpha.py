"""Alpha operation: scales the opacity of an image."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from imagedirective.operations.base import ImageOperation, OperationContext, OperationResult
from imagedirective.utils.image_utils import to_positive_int_list


@dataclass(frozen=True, slots=True)
class AlphaParameters:
    """Opacity percentage in ``0..100``."""

    percentage: int = 100


class Alpha(ImageOperation[AlphaParameters]):
    """Multiplies the alpha channel by a percentage."""

    pattern = re.compile(r"alpha=\d+")

    def parse(self, matched: str) -> AlphaParameters:
        values = to_positive_int_list(matched)
        percentage = min(values[0], 100) if values else 100
        return AlphaParameters(percentage=percentage)

    def apply(self, image: Any, parameters: AlphaParameters, context: OperationContext) -> OperationResult:
        if parameters.percentage >= 100:
            return self.skip(image, "opacity is already 100%")

        result = image.convert("RGBA")
        factor = parameters.percentage
        alpha = result.getchannel("A").point(lambda value: value * factor // 100)
        result.putalpha(alpha)
        return OperationResult(image=result)
