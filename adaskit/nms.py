"""Non-maximum suppression over scored boxes."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

__all__ = ["Anchor", "nms"]


class _Box(Protocol):
    left: float
    top: float
    right: float
    bottom: float


@dataclass
class Anchor:
    """A box given by inclusive pixel edges."""

    left: float
    top: float
    right: float
    bottom: float

    def width(self) -> float:
        return (self.right - self.left) + 1.0

    def height(self) -> float:
        return (self.bottom - self.top) + 1.0

    def x_center(self) -> float:
        return self.left + (self.width() - 1.0) / 2.0

    def y_center(self) -> float:
        return self.top + (self.height() - 1.0) / 2.0


def nms(
    boxes: Sequence[_Box],
    scores: Sequence[float],
    thresh: float,
    include_boundaries: bool = False,
) -> list[int]:
    """Indices of the boxes kept, highest score first; negative scores are dropped."""
    extra = 1.0 if include_boundaries else 0.0
    areas = [(b.right - b.left + extra) * (b.bottom - b.top + extra) for b in boxes]
    order = sorted(range(len(scores)), key=lambda i: scores[i], reverse=True)
    order = [i for i in order if scores[i] >= 0]
    suppressed = [False] * len(order)

    keep: list[int] = []
    for pos, idx1 in enumerate(order):
        if suppressed[pos]:
            continue
        keep.append(idx1)
        remaining = False
        for later in range(pos + 1, len(order)):
            if suppressed[later]:
                continue
            remaining = True
            idx2 = order[later]
            a, b = boxes[idx1], boxes[idx2]
            width = min(a.right, b.right) - max(a.left, b.left)
            height = min(a.bottom, b.bottom) - max(a.top, b.top)
            intersection = width * height if width > 0 and height > 0 else 0.0
            union = areas[idx1] + areas[idx2] - intersection
            if union:
                overlap = intersection / union
            else:
                overlap = math.nan if intersection == 0 else math.inf
            if overlap >= thresh:
                suppressed[later] = True
        if not remaining:
            break
    return keep