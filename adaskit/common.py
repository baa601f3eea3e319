"""Small shared helpers: clamping, file names and a colour palette."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

__all__ = ["clamp", "file_name_no_ext", "Color", "CITYSCAPES_COLORS"]

T = TypeVar("T")


def clamp(value: T, low: T, high: T) -> T:
    """Limit ``value`` to the range ``[low, high]``."""
    if value < low:  # type: ignore[operator]
        return low
    if value > high:  # type: ignore[operator]
        return high
    return value


def file_name_no_ext(filepath: str) -> str:
    """Strip everything from the last dot of ``filepath`` on."""
    pos = filepath.rfind(".")
    if pos == -1:
        return filepath
    return filepath[:pos]


@dataclass(frozen=True)
class Color:
    """An 8-bit colour given by its red, green and blue channels."""

    red: int
    green: int
    blue: int

    def __post_init__(self) -> None:
        for channel in (self.red, self.green, self.blue):
            if not 0 <= channel <= 255:
                raise ValueError(f"Colour channel out of range: {channel}")


# Colours of the training classes of the Cityscapes dataset.
CITYSCAPES_COLORS: tuple[Color, ...] = tuple(
    Color(r, g, b)
    for r, g, b in (
        (128, 64, 128),
        (232, 35, 244),
        (70, 70, 70),
        (156, 102, 102),
        (153, 153, 190),
        (153, 153, 153),
        (30, 170, 250),
        (0, 220, 220),
        (35, 142, 107),
        (152, 251, 152),
        (180, 130, 70),
        (60, 20, 220),
        (0, 0, 255),
        (142, 0, 0),
        (70, 0, 0),
        (100, 60, 0),
        (90, 0, 0),
        (230, 0, 0),
        (32, 11, 119),
        (0, 74, 111),
        (81, 0, 81),
    )
)