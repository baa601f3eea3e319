"""Image resizing with optional aspect preservation and letterboxing."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

import numpy as np
from PIL import Image

__all__ = ["ResizeMode", "resize_image_ext"]


class ResizeMode(Enum):
    FILL = 0
    KEEP_ASPECT = 1
    KEEP_ASPECT_LETTERBOX = 2


def _resize(image: np.ndarray, width: int, height: int, interpolation: Image.Resampling) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("Target size must be positive")
    planes = image[..., None] if image.ndim == 2 else image
    resized = np.stack(
        [
            np.asarray(
                Image.fromarray(np.ascontiguousarray(planes[..., c], dtype=np.float32)).resize(
                    (width, height), interpolation
                )
            )
            for c in range(planes.shape[2])
        ],
        axis=-1,
    )
    if image.dtype == np.uint8:
        resized = np.clip(np.rint(resized), 0, 255).astype(np.uint8)
    else:
        resized = resized.astype(image.dtype)
    return resized[..., 0] if image.ndim == 2 else resized


def resize_image_ext(
    image: np.ndarray,
    width: int,
    height: int,
    resize_mode: ResizeMode = ResizeMode.FILL,
    interpolation: Image.Resampling = Image.Resampling.BILINEAR,
    border_value: Sequence[float] = (0, 0, 0),
) -> tuple[np.ndarray, tuple[int, int, int, int]]:
    """Resize ``image`` to ``width`` x ``height``.

    Returns the resized image and the (x, y, width, height) region that holds
    the picture; the rest is filled with ``border_value``.
    """
    if image.ndim not in (2, 3):
        raise ValueError("Image must have two or three dimensions")
    rows, cols = image.shape[:2]
    if width == cols and height == rows:
        return image, (0, 0, width, height)

    if resize_mode is ResizeMode.FILL:
        return _resize(image, width, height, interpolation), (0, 0, width, height)

    scale = min(width / cols, height / rows)
    new_width = min(int(np.rint(cols * scale)), width)
    new_height = min(int(np.rint(rows * scale)), height)
    resized = _resize(image, new_width, new_height, interpolation)

    if resize_mode is ResizeMode.KEEP_ASPECT:
        dx = dy = 0
    else:
        dx = (width - new_width) // 2
        dy = (height - new_height) // 2

    if image.ndim == 2:
        fill = border_value[0] if len(border_value) else 0
        dst = np.full((height, width), fill, dtype=image.dtype)
    else:
        channels = image.shape[2]
        fill_values = (list(border_value) + [0] * channels)[:channels]
        dst = np.empty((height, width, channels), dtype=image.dtype)
        dst[...] = np.asarray(fill_values).astype(image.dtype)
    dst[dy:dy + new_height, dx:dx + new_width] = resized
    return dst, (dx, dy, new_width, new_height)