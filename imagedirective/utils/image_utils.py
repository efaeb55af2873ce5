"""Helpers for turning directive token values into typed values."""

from __future__ import annotations

import re
from typing import List, Tuple

from PIL import ImageColor

RGBA = Tuple[int, int, int, int]

TRANSPARENT: RGBA = (0, 0, 0, 0)

_INTEGER_PATTERN = re.compile(r"\d+")
_FLOAT_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")


def to_positive_int_list(text: str) -> List[int]:
    """Return every unsigned integer found in ``text`` in order of appearance."""
    return [int(value) for value in _INTEGER_PATTERN.findall(text)]


def to_float_list(text: str) -> List[float]:
    """Return every (optionally signed) decimal number found in ``text``."""
    return [float(value) for value in _FLOAT_PATTERN.findall(text)]


def clamp_byte(value: int) -> int:
    return max(0, min(255, int(value)))


def parse_color(value: str) -> RGBA:
    """Parse ``transparent``, an ``r,g,b,a`` list or a 3/6 digit hex string."""
    value = value.strip()
    if not value or value.lower() == "transparent":
        return TRANSPARENT

    if "," in value:
        components = to_positive_int_list(value)
        if len(components) < 4:
            return TRANSPARENT
        red, green, blue, alpha = (clamp_byte(component) for component in components[:4])
        return red, green, blue, alpha

    try:
        red, green, blue = ImageColor.getrgb(f"#{value}")[:3]
    except ValueError:
        return TRANSPARENT
    return red, green, blue, 255
