"""Conversion of raw camera frames (GREY, YUYV, UYVY, NV12) to images."""

from __future__ import annotations

from enum import IntEnum

import numpy as np
from numpy.typing import ArrayLike

__all__ = [
    "PixelFormat",
    "yuv_to_rgb_pixel",
    "yuyv_to_rgb",
    "uyvy_to_rgb",
    "nv12_to_rgb",
    "frame_sizes",
    "convert_frame",
]


def _fourcc(code: str) -> int:
    return int.from_bytes(code.encode("ascii"), "little")


class PixelFormat(IntEnum):
    """Camera pixel formats, valued by their four-character codes."""

    GREY = _fourcc("GREY")
    YUYV = _fourcc("YUYV")
    UYVY = _fourcc("UYVY")
    NV12 = _fourcc("NV12")


def _rgb(y: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Convert Y, U and V sample arrays to dimmed RGB triples."""
    y = y.astype(np.float64)
    du = u.astype(np.float64) - 128
    dv = v.astype(np.float64) - 128
    r = np.trunc(y + 1.370705 * dv)
    g = np.trunc(y - 0.698001 * dv - 0.337633 * du)
    b = np.trunc(y + 1.732446 * du)
    rgb = np.clip(np.stack([r, g, b], axis=-1), 0, 255).astype(np.int64)
    return (rgb * 220 // 256).astype(np.uint8)


def _samples(data: ArrayLike, size: int) -> np.ndarray:
    if isinstance(data, (bytes, bytearray, memoryview)):
        samples = np.frombuffer(data, dtype=np.uint8)
    else:
        samples = np.asarray(data, dtype=np.uint8).ravel()
    if samples.size < size:
        raise ValueError(f"Frame holds {samples.size} bytes, {size} are needed")
    return samples[:size].astype(np.int64)


def _check_dimensions(width: int, height: int, multiple: int) -> int:
    if width < 0 or height < 0:
        raise ValueError("Width and height must not be negative")
    pixels = width * height
    if pixels % multiple:
        raise ValueError(f"The pixel count must be a multiple of {multiple}")
    return pixels


def yuv_to_rgb_pixel(y: int, u: int, v: int) -> tuple[int, int, int]:
    """Convert one Y/U/V sample to an (r, g, b) triple scaled by 220/256."""
    r, g, b = _rgb(np.array([y]), np.array([u]), np.array([v]))[0]
    return int(r), int(g), int(b)


def _packed_422(data: ArrayLike, width: int, height: int, order: tuple[int, int, int, int]) -> np.ndarray:
    pixels = _check_dimensions(width, height, 2)
    groups = _samples(data, pixels * 2).reshape(-1, 4)
    y0, u, y1, v = (groups[:, i] for i in order)
    first = _rgb(y0, u, v)
    second = _rgb(y1, u, v)
    return np.stack([first, second], axis=1).reshape(height, width, 3)


def yuyv_to_rgb(data: ArrayLike, width: int, height: int) -> np.ndarray:
    """Convert a packed Y0 U Y1 V frame to an RGB array of shape (height, width, 3)."""
    return _packed_422(data, width, height, (0, 1, 2, 3))


def uyvy_to_rgb(data: ArrayLike, width: int, height: int) -> np.ndarray:
    """Convert a packed U Y0 V Y1 frame to an RGB array of shape (height, width, 3)."""
    return _packed_422(data, width, height, (1, 0, 3, 2))


def nv12_to_rgb(data: ArrayLike, width: int, height: int) -> np.ndarray:
    """Convert an NV12 frame to RGB; every four luma bytes share one U/V pair."""
    pixels = _check_dimensions(width, height, 4)
    samples = _samples(data, pixels + pixels // 2)
    luma = samples[:pixels]
    chroma = samples[pixels:].reshape(-1, 2)
    u = np.repeat(chroma[:, 0], 4)
    v = np.repeat(chroma[:, 1], 4)
    return _rgb(luma, u, v).reshape(height, width, 3)


def frame_sizes(pixel_format: int, width: int, height: int) -> tuple[int, int]:
    """Return (display size, raw size) in bytes for a frame of the given format."""
    fmt = PixelFormat(pixel_format)
    if fmt is PixelFormat.GREY:
        return width * height, width * height
    return width * height * 3, width * height * 2


def convert_frame(data: ArrayLike, pixel_format: int, width: int, height: int) -> np.ndarray:
    """Convert a raw frame to a displayable array: grey (h, w) or RGB (h, w, 3)."""
    fmt = PixelFormat(pixel_format)
    if fmt is PixelFormat.GREY:
        pixels = _check_dimensions(width, height, 1)
        return _samples(data, pixels).astype(np.uint8).reshape(height, width)
    converters = {
        PixelFormat.YUYV: yuyv_to_rgb,
        PixelFormat.UYVY: uyvy_to_rgb,
        PixelFormat.NV12: nv12_to_rgb,
    }
    return converters[fmt](data, width, height)