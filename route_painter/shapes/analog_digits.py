"""Clock-style digit outlines for GPS art.

Each digit is a single continuous outline in a unit cell with the origin at
the top-left and Y growing downwards. Outlines use few points so that they
survive road snapping as recognizable shapes.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from ..errors import UnsupportedCharacterError
from ..models import Point2D

DIGIT_SPACING = 1.1

_Outline = Tuple[Tuple[float, float], ...]

ANALOG_DIGITS: Dict[str, _Outline] = {
    "0": (
        (0.5, 0.0), (0.75, 0.05), (0.9, 0.2), (0.95, 0.5), (0.9, 0.8),
        (0.75, 0.95), (0.5, 1.0), (0.25, 0.95), (0.1, 0.8), (0.05, 0.5),
        (0.1, 0.2), (0.25, 0.05), (0.5, 0.0),
    ),
    "1": (
        (0.35, 0.15), (0.5, 0.0), (0.5, 1.0), (0.3, 1.0), (0.7, 1.0),
        (0.5, 1.0), (0.5, 0.0), (0.35, 0.15),
    ),
    "2": (
        (0.1, 0.2), (0.15, 0.05), (0.3, 0.0), (0.7, 0.0), (0.85, 0.05),
        (0.9, 0.15), (0.9, 0.3), (0.85, 0.4), (0.7, 0.5), (0.5, 0.6),
        (0.3, 0.75), (0.15, 0.9), (0.1, 1.0), (0.9, 1.0), (0.9, 0.85),
        (0.3, 0.85), (0.5, 0.7), (0.7, 0.55), (0.8, 0.4), (0.8, 0.2),
        (0.75, 0.1), (0.6, 0.05), (0.4, 0.05), (0.25, 0.1), (0.15, 0.18),
        (0.1, 0.2),
    ),
    "3": (
        (0.15, 0.15), (0.25, 0.05), (0.4, 0.0), (0.6, 0.0), (0.75, 0.05),
        (0.85, 0.15), (0.9, 0.25), (0.85, 0.35), (0.7, 0.45), (0.6, 0.5),
        (0.7, 0.55), (0.85, 0.65), (0.9, 0.75), (0.85, 0.85), (0.75, 0.95),
        (0.6, 1.0), (0.4, 1.0), (0.25, 0.95), (0.15, 0.85), (0.1, 0.75),
        (0.15, 0.7), (0.25, 0.75), (0.25, 0.85), (0.35, 0.92), (0.5, 0.95),
        (0.65, 0.92), (0.75, 0.85), (0.8, 0.75), (0.75, 0.6), (0.6, 0.52),
        (0.5, 0.5), (0.6, 0.48), (0.75, 0.4), (0.8, 0.25), (0.75, 0.15),
        (0.65, 0.08), (0.5, 0.05), (0.35, 0.08), (0.25, 0.15), (0.15, 0.15),
    ),
    "4": (
        (0.7, 0.0), (0.7, 0.7), (0.9, 0.7), (0.9, 0.8), (0.7, 0.8),
        (0.7, 1.0), (0.6, 1.0), (0.6, 0.8), (0.1, 0.8), (0.1, 0.7),
        (0.6, 0.7), (0.6, 0.0), (0.7, 0.0),
    ),
    "5": (
        (0.9, 0.0), (0.9, 0.1), (0.2, 0.1), (0.2, 0.45), (0.4, 0.45),
        (0.6, 0.48), (0.75, 0.55), (0.85, 0.65), (0.9, 0.75), (0.85, 0.85),
        (0.75, 0.95), (0.6, 1.0), (0.4, 1.0), (0.25, 0.95), (0.15, 0.85),
        (0.1, 0.75), (0.15, 0.7), (0.2, 0.75), (0.25, 0.85), (0.35, 0.92),
        (0.5, 0.95), (0.65, 0.92), (0.75, 0.85), (0.8, 0.75), (0.75, 0.6),
        (0.65, 0.53), (0.5, 0.5), (0.3, 0.5), (0.1, 0.48), (0.1, 0.0),
        (0.9, 0.0),
    ),
    "6": (
        (0.7, 0.05), (0.5, 0.0), (0.3, 0.05), (0.15, 0.15), (0.08, 0.3),
        (0.05, 0.5), (0.08, 0.7), (0.15, 0.85), (0.3, 0.95), (0.5, 1.0),
        (0.7, 0.95), (0.85, 0.85), (0.92, 0.7), (0.95, 0.5), (0.9, 0.35),
        (0.8, 0.5), (0.7, 0.9), (0.5, 0.95), (0.3, 0.9), (0.2, 0.8),
        (0.15, 0.65), (0.15, 0.5), (0.2, 0.35), (0.3, 0.1), (0.5, 0.05),
        (0.65, 0.08), (0.7, 0.05),
    ),
    "7": (
        (0.1, 0.0), (0.9, 0.0), (0.9, 0.1), (0.4, 1.0), (0.3, 1.0),
        (0.8, 0.1), (0.1, 0.1), (0.1, 0.0),
    ),
    # Upper loop, crossing at the waist, lower loop, back to the waist.
    "8": (
        (0.5, 0.0), (0.7, 0.03), (0.85, 0.1), (0.9, 0.2), (0.85, 0.3),
        (0.7, 0.37), (0.5, 0.43), (0.3, 0.5), (0.15, 0.6), (0.08, 0.75),
        (0.15, 0.9), (0.3, 0.97), (0.5, 1.0), (0.7, 0.97), (0.85, 0.9),
        (0.92, 0.75), (0.85, 0.6), (0.7, 0.5), (0.5, 0.43), (0.3, 0.37),
        (0.15, 0.3), (0.1, 0.2), (0.15, 0.1), (0.3, 0.03), (0.5, 0.0),
    ),
    "9": (
        (0.3, 0.95), (0.5, 1.0), (0.7, 0.95), (0.85, 0.85), (0.92, 0.7),
        (0.95, 0.5), (0.92, 0.3), (0.85, 0.15), (0.7, 0.05), (0.5, 0.0),
        (0.3, 0.05), (0.15, 0.15), (0.08, 0.3), (0.05, 0.5), (0.1, 0.65),
        (0.2, 0.5), (0.3, 0.1), (0.5, 0.05), (0.7, 0.1), (0.8, 0.2),
        (0.85, 0.35), (0.85, 0.5), (0.8, 0.65), (0.7, 0.9), (0.5, 0.95),
        (0.35, 0.92), (0.3, 0.95),
    ),
}


def get_analog_digit(char: str) -> List[Point2D]:
    """Return a fresh copy of the outline for ``char``."""

    try:
        outline = ANALOG_DIGITS[char]
    except KeyError:
        raise UnsupportedCharacterError(
            f"Analog digit not defined for character: {char!r}"
        ) from None
    return [Point2D(x, y) for x, y in outline]


def is_analog_digit_supported(char: str) -> bool:
    return char in ANALOG_DIGITS


def get_supported_characters() -> List[str]:
    return list(ANALOG_DIGITS)


__all__ = [
    "ANALOG_DIGITS",
    "DIGIT_SPACING",
    "get_analog_digit",
    "is_analog_digit_supported",
    "get_supported_characters",
]
