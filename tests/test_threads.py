import gc
import threading

import pytest

from adaskit.threads import ConcurrentContainer, Task, VideoFrame, Worker, try_push


class RecordingTask(Task):
    def __init__(self, name, frame_id, priority, log, done, expected):
        super().__init__(VideoFrame(0, frame_id), priority)
        self.name = name
        self.log = log
        self.done = done
        self.expected = expected

    def is_ready(self):
        return True

    def process(self):
        self.log.append(self.name)
        if len(self.log) == self.expected:
            self.done.set()


class GatedTask(Task):
    def __init__(self):
        super().__init__(VideoFrame(0, 0))
        self.ready = threading.Event()
        self.processed = threading.Event()

    def is_ready(self):
        return self.ready.is_set()

    def process(self):
        self.processed.set()


class FailingTask(Task):
    def __init__(self):
        super().__init__(VideoFrame(0, 0))

    def is_ready(self):
        return True

    def process(self):
        raise RuntimeError("task failed")


def test_tasks_run_by_priority_then_frame_id():
    log, done = [], threading.Event()
    worker = Worker(1)
    worker.push(RecordingTask("a", 2, 0.0, log, done, 3))
    worker.push(RecordingTask("b", 5, 1.0, log, done, 3))
    worker.push(RecordingTask("c", 1, 0.0, log, done, 3))
    worker.run_threads()
    assert done.wait(5)
    worker.stop()
    worker.join()
    assert log == ["b", "c", "a"]


def test_task_waits_until_ready():
    task = GatedTask()
    with Worker(2) as worker:
        worker.push(task)
        assert not task.processed.wait(0.05)
        task.ready.set()
        assert task.processed.wait(5)


def test_exception_is_raised_by_join():
    worker = Worker(1)
    worker.run_threads()
    worker.push(FailingTask())
    with pytest.raises(RuntimeError, match="task failed"):
        worker.join()


def test_try_push_live_worker():
    log, done = [], threading.Event()
    worker = Worker(1)
    worker.run_threads()
    import weakref

    pushed = try_push(weakref.ref(worker), RecordingTask("x", 0, 0.0, log, done, 1))
    assert pushed is True
    assert done.wait(5)
    worker.stop()
    worker.join()
    assert log == ["x"]


def test_try_push_dead_worker():
    import weakref

    worker = Worker(1)
    ref = weakref.ref(worker)
    del worker
    gc.collect()
    assert try_push(ref, GatedTask()) is False


def test_concurrent_container_is_lifo():
    container = ConcurrentContainer()
    assert container.locked_empty()
    container.locked_push_back(1)
    container.locked_push_back(2)
    assert container.locked_size() == 2
    assert container.locked_try_pop() == 2
    assert container.locked_try_pop() == 1
    assert container.locked_try_pop() is None
    assert container.locked_empty()


def test_concurrent_container_snapshot_is_copy():
    container = ConcurrentContainer()
    container.locked_push_back("a")
    snap = container.snapshot()
    snap.append("b")
    assert container.snapshot() == ["a"]


def test_concurrent_pushes_from_threads():
    container = ConcurrentContainer()

    def fill():
        for i in range(100):
            container.locked_push_back(i)

    threads = [threading.Thread(target=fill) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert container.locked_size() == 400