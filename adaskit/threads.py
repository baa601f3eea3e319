"""Prioritised task processing on a pool of worker threads."""

from __future__ import annotations

import bisect
import itertools
import threading
import weakref
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

__all__ = ["VideoFrame", "Task", "Worker", "try_push", "ConcurrentContainer"]

T = TypeVar("T")


@dataclass
class VideoFrame:
    """A frame of one source; it may also stand for a whole grid."""

    source_id: int
    frame_id: int
    frame: Any = None
    timestamp: float = 0.0


class Task(ABC):
    """A unit of work tied to a video frame; higher priority runs first."""

    def __init__(self, shared_video_frame: VideoFrame, priority: float = 0.0) -> None:
        self.name = ""
        self.shared_video_frame = shared_video_frame
        self.priority = priority

    @abstractmethod
    def is_ready(self) -> bool:
        """Whether the task can be processed now."""

    @abstractmethod
    def process(self) -> None:
        """Do the task's work."""


class Worker:
    """Runs pushed tasks on ``thread_num`` threads, highest priority first.

    Ties are broken by lower frame id, then by push order. The first exception
    raised by a task stops the worker and is raised again by :meth:`join`.
    """

    def __init__(self, thread_num: int) -> None:
        self._thread_num = thread_num
        self._threads: list[threading.Thread] = []
        self._tasks: list[tuple[tuple[float, int, int], Task]] = []
        self._cond = threading.Condition()
        self._running = False
        self._exception: BaseException | None = None
        self._exception_lock = threading.Lock()
        self._sequence = itertools.count()

    def __enter__(self) -> Worker:
        self.run_threads()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
        self.join()

    def run_threads(self) -> None:
        self._running = True
        self._threads = [
            threading.Thread(target=self._thread_func, daemon=True) for _ in range(self._thread_num)
        ]
        for thread in self._threads:
            thread.start()

    def push(self, task: Task) -> None:
        key = (-task.priority, task.shared_video_frame.frame_id, next(self._sequence))
        with self._cond:
            bisect.insort(self._tasks, (key, task), key=lambda entry: entry[0])
            self._cond.notify()

    def _record(self, error: BaseException) -> None:
        with self._exception_lock:
            if self._exception is None:
                self._exception = error
                self.stop()

    def _take_ready(self) -> Task | None:
        for index, (_, task) in enumerate(self._tasks):
            if task.is_ready():
                del self._tasks[index]
                return task
        return None

    def _thread_func(self) -> None:
        while self._running:
            task = None
            with self._cond:
                while self._running and not self._tasks:
                    self._cond.wait()
                try:
                    task = self._take_ready()
                except Exception as error:  # noqa: BLE001
                    self._record(error)
                    continue
                if task is None and self._running and self._tasks:
                    self._cond.wait(timeout=0.001)
            if task is not None:
                try:
                    task.process()
                except Exception as error:  # noqa: BLE001
                    self._record(error)

    def stop(self) -> None:
        self._running = False
        with self._cond:
            self._cond.notify_all()

    def join(self) -> None:
        """Wait for the threads to end; re-raise a task's exception if one occurred."""
        for thread in self._threads:
            thread.join()
        if self._exception is not None:
            raise self._exception


def try_push(worker_ref: weakref.ReferenceType[Worker], task: Task) -> bool:
    """Push ``task`` if the worker still exists; return whether it was pushed."""
    worker = worker_ref()
    if worker is None:
        return False
    worker.push(task)
    return True


class ConcurrentContainer(Generic[T]):
    """A list guarded by a lock, used as a stack."""

    def __init__(self) -> None:
        self.container: list[T] = []
        self.mutex = threading.Lock()

    def locked_empty(self) -> bool:
        with self.mutex:
            return not self.container

    def locked_size(self) -> int:
        with self.mutex:
            return len(self.container)

    def locked_push_back(self, value: T) -> None:
        with self.mutex:
            self.container.append(value)

    def locked_try_pop(self) -> T | None:
        """Remove and return the last value, or None if the container is empty."""
        with self.mutex:
            return self.container.pop() if self.container else None

    def snapshot(self) -> list[T]:
        """A copy of the contents."""
        with self.mutex:
            return list(self.container)