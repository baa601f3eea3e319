"""Frame sources that read a single image file or a directory of images."""

from __future__ import annotations

import math
import os
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator
from enum import Enum

import numpy as np
from PIL import Image

from adaskit.performance_metrics import PerformanceMetrics

__all__ = [
    "ReadType",
    "InvalidInput",
    "OpenError",
    "ImagesCapture",
    "ImreadWrapper",
    "DirReader",
    "open_images_capture",
]


class ReadType(Enum):
    """Whether frames may share storage with the source or must be copies."""

    EFFICIENT = "efficient"
    SAFE = "safe"


class InvalidInput(RuntimeError):
    """The input does not name a source of this kind."""


class OpenError(RuntimeError):
    """The input names a source of this kind, but it cannot be read."""


def _imread(path: str) -> np.ndarray | None:
    """Load an image as a BGR uint8 array, or None if it cannot be decoded."""
    try:
        with Image.open(path) as img:
            rgb = np.asarray(img.convert("RGB"))
    except (OSError, ValueError, Image.DecompressionBombError):
        return None
    return np.ascontiguousarray(rgb[..., ::-1])


class ImagesCapture(ABC):
    """A source of frames; :meth:`read` returns None once it is exhausted."""

    def __init__(self, loop: bool) -> None:
        self.loop = loop
        self._reader_metrics = PerformanceMetrics()

    @abstractmethod
    def fps(self) -> float:
        """Frames per second of the source."""

    @abstractmethod
    def read(self) -> np.ndarray | None:
        """The next frame, or None when there is none."""

    @abstractmethod
    def type_name(self) -> str:
        """A short name of the kind of source."""

    def metrics(self) -> PerformanceMetrics:
        """Reading latency statistics."""
        return self._reader_metrics

    def __iter__(self) -> Iterator[np.ndarray]:
        while (frame := self.read()) is not None:
            yield frame


class ImreadWrapper(ImagesCapture):
    """A single image file, read once or, with ``loop``, forever."""

    def __init__(self, path: str, loop: bool) -> None:
        super().__init__(loop)
        start_time = time.monotonic()
        if not os.path.exists(path) or not os.access(path, os.R_OK):
            raise InvalidInput(f"Can't find the image by {path}")
        image = _imread(path)
        if image is None:
            raise OpenError(f"Can't open the image from {path}")
        self._image = image
        self._can_read = True
        self._reader_metrics.update(start_time)

    def fps(self) -> float:
        return 1.0

    def type_name(self) -> str:
        return "IMAGE"

    def read(self) -> np.ndarray | None:
        if self.loop:
            return self._image.copy()
        if self._can_read:
            self._can_read = False
            return self._image.copy()
        return None


class DirReader(ImagesCapture):
    """The images of a directory in name order; unreadable files are skipped."""

    def __init__(
        self,
        path: str,
        loop: bool,
        initial_image_id: int = 0,
        read_length_limit: int | None = None,
    ) -> None:
        super().__init__(loop)
        self._path = path
        self._initial_image_id = initial_image_id
        self._read_length_limit = math.inf if read_length_limit is None else read_length_limit
        self._next_img_id = 0
        try:
            names = os.listdir(path)
        except OSError:
            raise InvalidInput(f"Can't find the dir by {path}") from None
        if not names:
            raise OpenError(f"The dir {path} is empty")
        self._names = sorted(names)

        self._file_id = 0
        read_imgs = 0
        while self._file_id < len(self._names):
            if self._load(self._file_id) is not None:
                read_imgs += 1
                if read_imgs - 1 >= initial_image_id:
                    return
            self._file_id += 1
        raise OpenError(f"Can't read the first image from {path}")

    def _load(self, index: int) -> np.ndarray | None:
        return _imread(f"{self._path}/{self._names[index]}")

    def fps(self) -> float:
        return 1.0

    def type_name(self) -> str:
        return "DIR"

    def read(self) -> np.ndarray | None:
        start_time = time.monotonic()

        while self._file_id < len(self._names) and self._next_img_id < self._read_length_limit:
            image = self._load(self._file_id)
            self._file_id += 1
            if image is not None:
                self._next_img_id += 1
                self._reader_metrics.update(start_time)
                return image

        if self.loop:
            self._file_id = 0
            read_imgs = 0
            while self._file_id < len(self._names):
                image = self._load(self._file_id)
                self._file_id += 1
                if image is not None:
                    read_imgs += 1
                    if read_imgs - 1 >= self._initial_image_id:
                        self._next_img_id = 1
                        self._reader_metrics.update(start_time)
                        return image
        return None


def open_images_capture(
    source: str,
    loop: bool,
    read_type: ReadType = ReadType.EFFICIENT,
    initial_image_id: int = 0,
    read_length_limit: int | None = None,
    camera_resolution: tuple[int, int] = (1280, 720),
) -> ImagesCapture:
    """Open ``source`` as an image file or else as a directory of images.

    ``read_length_limit`` of None means no limit. ``read_type`` and
    ``camera_resolution`` do not affect image and directory sources, whose
    frames are always fresh arrays.
    """
    if read_length_limit == 0:
        raise ValueError("Read length limit must be positive")
    invalid_inputs: list[str] = []
    open_errors: list[str] = []

    try:
        return ImreadWrapper(source, loop)
    except InvalidInput as error:
        invalid_inputs.append(str(error))
    except OpenError as error:
        open_errors.append(str(error))

    try:
        return DirReader(source, loop, initial_image_id, read_length_limit)
    except InvalidInput as error:
        invalid_inputs.append(str(error))
    except OpenError as error:
        open_errors.append(str(error))

    messages = open_errors or invalid_inputs
    raise RuntimeError("".join(f"{message}\n" for message in messages))