"""Frame sources shared by several reading channels."""

from __future__ import annotations

import threading
import weakref
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Protocol

import numpy as np

__all__ = [
    "CAP_PROP_POS_FRAMES",
    "CAP_PROP_FRAME_WIDTH",
    "CAP_PROP_FRAME_HEIGHT",
    "InputSource",
    "InputChannel",
    "VideoCaptureSource",
    "ImageSource",
]

CAP_PROP_POS_FRAMES = 1
CAP_PROP_FRAME_WIDTH = 3
CAP_PROP_FRAME_HEIGHT = 4


class _Capture(Protocol):
    def read(self) -> tuple[bool, Any]: ...

    def set(self, prop_id: int, value: float) -> bool: ...

    def get(self, prop_id: int) -> float: ...


class InputSource(ABC):
    """A frame source; channels take turns reading it while holding ``lock``."""

    def __init__(self) -> None:
        self.lock = threading.Lock()

    @abstractmethod
    def read(self, caller: InputChannel) -> np.ndarray | None:
        """Read a frame for ``caller``; None when the source has nothing more."""

    @abstractmethod
    def add_subscriber(self, channel: InputChannel) -> None:
        """Register a channel that receives the source's frames."""

    @abstractmethod
    def size(self) -> tuple[int, int]:
        """The (width, height) of the frames."""


class InputChannel:
    """One reader of a shared source, with a queue of frames read by others."""

    def __init__(self, source: InputSource) -> None:
        self._source = source
        self._queue: deque[np.ndarray] = deque()
        self._queue_lock = threading.Lock()

    @classmethod
    def create(cls, source: InputSource) -> InputChannel:
        """Make a channel and subscribe it to ``source``."""
        channel = cls(source)
        source.add_subscriber(channel)
        return channel

    def read(self) -> np.ndarray | None:
        """The next frame for this channel, or None when there is none."""
        with self._queue_lock:
            if self._queue:
                return self._queue.popleft().copy()
        with self._source.lock:
            with self._queue_lock:
                if self._queue:
                    return self._queue.popleft().copy()
                return self._source.read(self)

    def push(self, frame: np.ndarray) -> None:
        with self._queue_lock:
            self._queue.append(frame)

    def size(self) -> tuple[int, int]:
        return self._source.size()


class VideoCaptureSource(InputSource):
    """A video capture whose frames are handed to every subscribed channel.

    ``capture`` offers ``read() -> (ok, frame)``, ``set(prop, value)`` and
    ``get(prop)`` with the ``CAP_PROP_*`` property ids.
    """

    def __init__(self, capture: _Capture, loop: bool) -> None:
        super().__init__()
        self._capture = capture
        self._loop = loop
        self._subscribers: list[weakref.ReferenceType[InputChannel]] = []
        self._size = (
            int(capture.get(CAP_PROP_FRAME_WIDTH)),
            int(capture.get(CAP_PROP_FRAME_HEIGHT)),
        )

    def read(self, caller: InputChannel) -> np.ndarray | None:
        ok, frame = self._capture.read()
        if not ok:
            if not self._loop:
                return None
            self._capture.set(CAP_PROP_POS_FRAMES, 0)
            _, frame = self._capture.read()
        if len(self._subscribers) != 1 and frame is not None:
            shared = np.array(frame, copy=True)
            for ref in self._subscribers:
                channel = ref()
                if channel is not None and channel is not caller:
                    channel.push(shared)
        return frame

    def add_subscriber(self, channel: InputChannel) -> None:
        self._subscribers.append(weakref.ref(channel))

    def size(self) -> tuple[int, int]:
        return self._size


class ImageSource(InputSource):
    """A still image; each channel gets it once, or forever with ``loop``."""

    def __init__(self, image: np.ndarray, loop: bool) -> None:
        super().__init__()
        self._image = np.array(image, copy=True)
        self._loop = loop
        self._subscribers: weakref.WeakSet[InputChannel] = weakref.WeakSet()

    def read(self, caller: InputChannel) -> np.ndarray | None:
        if self._loop:
            return self._image.copy()
        if caller not in self._subscribers:
            return None
        self._subscribers.discard(caller)
        return self._image.copy()

    def add_subscriber(self, channel: InputChannel) -> None:
        if channel in self._subscribers:
            raise ValueError("The insertion did not take place")
        self._subscribers.add(channel)

    def size(self) -> tuple[int, int]:
        return (self._image.shape[1], self._image.shape[0])