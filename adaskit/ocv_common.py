"""Image array helpers: tensor filling, layouts and input/output transforms."""

from __future__ import annotations

import math
import re
from collections.abc import Sequence

import numpy as np
from PIL import Image

from adaskit.args import split

__all__ = [
    "get_mat_value",
    "mat_to_tensor",
    "get_layout_from_shape",
    "is_size_empty",
    "is_rect_empty",
    "OutputTransform",
    "InputTransform",
]

_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


def _channels(image: np.ndarray) -> int:
    if image.ndim == 2:
        return 1
    if image.ndim == 3:
        return image.shape[2]
    raise ValueError("Image must have two or three dimensions")


def _resize_array(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Bilinear resize of an (h, w) or (h, w, c) array to ``width`` x ``height``."""
    planes = image[..., None] if image.ndim == 2 else image
    resized = [
        np.asarray(
            Image.fromarray(np.ascontiguousarray(planes[..., c], dtype=np.float32)).resize(
                (width, height), Image.BILINEAR
            )
        )
        for c in range(planes.shape[2])
    ]
    out = np.stack(resized, axis=-1)
    if image.dtype == np.uint8:
        out = np.clip(np.rint(out), 0, 255).astype(np.uint8)
    else:
        out = out.astype(image.dtype)
    return out[..., 0] if image.ndim == 2 else out


def get_mat_value(mat: np.ndarray, h: int, w: int, c: int = 0) -> int | float:
    """Value at row ``h``, column ``w``, channel ``c`` of a uint8 or float32 image."""
    if mat.dtype not in (np.uint8, np.float32) or _channels(mat) not in (1, 3):
        raise ValueError("Image type is not recognized")
    if mat.ndim == 2:
        return mat[h, w].item()
    if mat.shape[2] == 1:
        return mat[h, w, 0].item()
    return mat[h, w, c].item()


def mat_to_tensor(mat: np.ndarray, tensor: np.ndarray, batch_index: int = 0) -> np.ndarray:
    """Resize ``mat`` to the NCHW ``tensor`` and write it into batch ``batch_index``."""
    if tensor.ndim != 4:
        raise ValueError("The tensor must have an NCHW shape")
    _, channels, height, width = tensor.shape
    if _channels(mat) != channels:
        raise ValueError("The number of channels for model input and image must match")
    if channels not in (1, 3):
        raise ValueError("Unsupported number of channels")
    if mat.dtype not in (np.uint8, np.float32):
        raise ValueError("Image type is not recognized")

    if mat.shape[1] != width or mat.shape[0] != height:
        resized = _resize_array(mat, width, height)
    else:
        resized = mat
    planes = (resized[..., None] if resized.ndim == 2 else resized).transpose(2, 0, 1)

    if tensor.dtype == np.float32:
        tensor[batch_index] = planes.astype(np.float32)
    elif tensor.dtype == np.uint8:
        if resized.dtype == np.float32:
            raise ValueError("Conversion of an image from float32 to uint8 is forbidden")
        tensor[batch_index] = planes
    else:
        raise ValueError("Unsupported tensor element type")
    return tensor


def get_layout_from_shape(shape: Sequence[int]) -> str:
    """Guess the layout of a tensor from its shape."""
    if len(shape) == 2:
        return "NC"
    if len(shape) == 3:
        return "CHW" if 1 <= shape[0] <= 4 else "HWC"
    if len(shape) == 4:
        return "NCHW" if 1 <= shape[1] <= 4 else "NHWC"
    raise ValueError(f"Unsupported {len(shape)}D shape")


def is_size_empty(size: Sequence[int]) -> bool:
    """True when a (width, height) size has no area."""
    width, height = size
    return width <= 0 or height <= 0


def is_rect_empty(rect: Sequence[int]) -> bool:
    """True when an (x, y, width, height) rectangle has no area."""
    _, _, width, height = rect
    return width <= 0 or height <= 0


class OutputTransform:
    """Scales output images and coordinates to fit an output resolution."""

    def __init__(
        self,
        input_size: tuple[int, int] | None = None,
        output_resolution: tuple[int, int] | None = None,
    ) -> None:
        self.do_resize = input_size is not None and output_resolution is not None
        self.scale_factor = 1.0
        self.input_size = tuple(input_size) if input_size is not None else (0, 0)
        self.output_resolution = tuple(output_resolution) if output_resolution is not None else (0, 0)
        self.new_resolution = (0, 0)

    def compute_resolution(self) -> tuple[int, int]:
        """Work out the scale factor and the (width, height) to resize to."""
        input_width, input_height = (float(v) for v in self.input_size)
        out_width, out_height = self.output_resolution
        self.scale_factor = min(out_height / input_height, out_width / input_width)
        self.new_resolution = (
            int(input_width * self.scale_factor),
            int(input_height * self.scale_factor),
        )
        return self.new_resolution

    def resize(self, image: np.ndarray) -> np.ndarray:
        """Return ``image`` scaled to the output resolution, or itself if no scaling applies."""
        if not self.do_resize:
            return image
        current = (image.shape[1], image.shape[0])
        if current != self.input_size:
            self.input_size = current
            self.compute_resolution()
        if self.scale_factor == 1:
            return image
        return _resize_array(image, *self.new_resolution)

    def scale_coord(self, coord: Sequence[float]) -> tuple:
        """Scale an (x, y) point."""
        x, y = coord
        if not self.do_resize or self.scale_factor == 1:
            return (x, y)
        return (math.floor(x * self.scale_factor), math.floor(y * self.scale_factor))

    def scale_rect(self, rect: Sequence[float]) -> tuple:
        """Scale an (x, y, width, height) rectangle."""
        x, y, width, height = rect
        if not self.do_resize or self.scale_factor == 1:
            return (x, y, width, height)
        x, y = self.scale_coord((x, y))
        return (
            x,
            y,
            math.floor(width * self.scale_factor),
            math.floor(height * self.scale_factor),
        )


class InputTransform:
    """Mean subtraction, scaling and channel reversal applied to model inputs."""

    def __init__(
        self,
        reverse_input_channels: bool = False,
        mean_values: str = "",
        scale_values: str = "",
    ) -> None:
        self.reverse_input_channels = reverse_input_channels
        self.is_trivial = not reverse_input_channels and not mean_values and not scale_values
        self.means = self.string_to_vec(mean_values) if mean_values else (0.0, 0.0, 0.0)
        self.std_scales = self.string_to_vec(scale_values) if scale_values else (1.0, 1.0, 1.0)

    def string_to_vec(self, text: str) -> tuple[float, float, float]:
        """Parse three space-separated numbers."""
        values = []
        for item in split(text, " "):
            match = _FLOAT_PREFIX.match(item)
            if match is None:
                raise ValueError("Invalid parameter --mean_values or --scale_values is provided.")
            values.append(float(match.group(1)))
        if len(values) != 3:
            raise ValueError(f'InputTransform expects 3 values per channel, but get "{text}".')
        return values[0], values[1], values[2]

    def __call__(self, inputs: np.ndarray) -> np.ndarray:
        if self.is_trivial:
            return inputs
        result = inputs.astype(np.float32)
        if self.reverse_input_channels:
            if _channels(result) not in (3, 4):
                raise ValueError("Channel reversal needs a three or four channel image")
            result = result[..., [2, 1, 0]]
        if result.ndim == 2:
            means = np.float32(self.means[0])
            scales = np.float32(self.std_scales[0])
        else:
            channels = result.shape[2]
            means = np.array((list(self.means) + [0.0])[:channels], dtype=np.float32)
            scales = np.array((list(self.std_scales) + [0.0])[:channels], dtype=np.float32)
        result = result - means
        result = result / scales
        return result.astype(np.float32)