"""A mosaic image that shows several video sources in a grid."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np
from PIL import Image

__all__ = ["GridMat", "fill_roi_color"]


def _as_bgr(frame: np.ndarray) -> np.ndarray:
    frame = np.asarray(frame)
    if frame.ndim == 2:
        frame = np.repeat(frame[..., None], 3, axis=2)
    if frame.dtype != np.uint8:
        frame = np.clip(np.rint(frame), 0, 255).astype(np.uint8)
    return frame


class GridMat:
    """Lays out equally sized cells for a set of source resolutions."""

    def __init__(
        self,
        sizes: Sequence[tuple[int, int]],
        max_disp: tuple[int, int] = (1920, 1080),
    ) -> None:
        max_width = max((int(w) for w, _ in sizes), default=0)
        max_height = max((int(h) for _, h in sizes), default=0)
        if max_width == 0 or max_height == 0:
            raise ValueError("Input resolution must not be zero.")

        count = len(sizes)
        grid_cols = int(math.ceil(math.sqrt(np.float32(count))))
        grid_rows = (count - 1) // grid_cols + 1
        grid_max_width = max_disp[0] // grid_cols
        grid_max_height = max_disp[1] // grid_rows

        scale_width = np.float32(grid_max_width) / np.float32(max_width)
        scale_height = np.float32(grid_max_height) / np.float32(max_height)
        scale = min(np.float32(1.0), min(scale_width, scale_height))

        self._cell_size = (
            int(np.float32(max_width) * scale),
            int(np.float32(max_height) * scale),
        )
        cell_w, cell_h = self._cell_size
        self._points = [(cell_w * (i % grid_cols), cell_h * (i // grid_cols)) for i in range(count)]
        self.outimg = np.zeros((cell_h * grid_rows, cell_w * grid_cols, 3), dtype=np.uint8)
        self._unupdated: set[int] = set()
        self.clear()

    def cell_size(self) -> tuple[int, int]:
        """The (width, height) of one cell."""
        return self._cell_size

    def _place(self, frame: np.ndarray, index: int) -> None:
        frame = _as_bgr(frame)
        x, y = self._points[index]
        cell_w, cell_h = self._cell_size
        cell = self.outimg[y:y + cell_h, x:x + cell_w]
        rows, cols = frame.shape[:2]
        if cols == cell_w and rows == cell_h:
            cell[...] = frame
        elif cell_w > cols and cell_h > rows:
            cell[:rows, :cols] = frame
        else:
            cell[...] = np.asarray(
                Image.fromarray(np.ascontiguousarray(frame[..., :3])).resize(
                    (cell_w, cell_h), Image.Resampling.BILINEAR
                )
            )

    def fill(self, frames: Sequence[np.ndarray]) -> None:
        """Draw every frame into its cell and mark all sources updated."""
        if len(frames) > len(self._points):
            raise ValueError(
                f"Cannot display {len(frames)} channels in a grid with {len(self._points)} cells"
            )
        for index, frame in enumerate(frames):
            self._place(frame, index)
        self._unupdated.clear()

    def update(self, frame: np.ndarray, source_id: int) -> None:
        """Draw one source's frame; a source may be updated once per round."""
        if not 0 <= source_id < len(self._points):
            raise IndexError(f"No cell for source {source_id}")
        self._place(frame, source_id)
        self._unupdated.remove(source_id)

    def is_filled(self) -> bool:
        return not self._unupdated

    def clear(self) -> None:
        """Mark every source as waiting for a new frame."""
        self._unupdated.update(range(len(self._points)))

    def unupdated_source_ids(self) -> set[int]:
        return set(self._unupdated)

    def mat(self) -> np.ndarray:
        """The mosaic image itself, not a copy."""
        return self.outimg


def fill_roi_color(
    image: np.ndarray,
    roi: tuple[int, int, int, int],
    color: Sequence[float],
    opacity: float,
) -> np.ndarray:
    """Blend ``color`` into the (x, y, width, height) region of ``image`` in place."""
    if opacity > 0:
        x, y, w, h = roi
        rows, cols = image.shape[:2]
        x1, y1 = max(x, 0), max(y, 0)
        x2, y2 = min(x + w, cols), min(y + h, rows)
        if x2 > x1 and y2 > y1:
            region = image[y1:y2, x1:x2]
            channels = 1 if image.ndim == 2 else image.shape[2]
            values = np.asarray((list(color) + [0.0] * channels)[:channels], dtype=np.float64)
            if image.ndim == 2:
                values = values[0]
            blended = values * opacity + region.astype(np.float64) * (1.0 - opacity)
            if np.issubdtype(image.dtype, np.integer):
                info = np.iinfo(image.dtype)
                blended = np.clip(np.rint(blended), info.min, info.max)
            region[...] = blended.astype(image.dtype)
    return image