"""Prefixed line logging to standard streams."""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterable
from typing import Any, TextIO

__all__ = ["LogStream", "info", "debug", "warn", "err"]


class _StdStream:
    """Looks up a standard stream on every write, so redirection is honoured."""

    def __init__(self, lookup: Callable[[], TextIO]) -> None:
        self._lookup = lookup

    def write(self, text: str) -> int:
        return self._lookup().write(text)

    def flush(self) -> None:
        self._lookup().flush()


def _stdout() -> TextIO:
    return sys.stdout


def _stderr() -> TextIO:
    return sys.stderr


class LogStream:
    """A stream that starts every line with ``[ PREFIX ] ``."""

    def __init__(self, prefix: str, stream: TextIO | None = None) -> None:
        self.prefix = prefix
        self._stream = stream if stream is not None else _StdStream(_stdout)
        self._new_line = True

    def write(self, arg: Any) -> LogStream:
        """Write one value; lists and tuples are written one element per line."""
        if isinstance(arg, (list, tuple)):
            for element in arg:
                self.write(element)
                self.end_line()
            return self
        if self._new_line:
            self._stream.write(f"[ {self.prefix} ] ")
            self._new_line = False
        self._stream.write(str(arg))
        return self

    def end_line(self) -> LogStream:
        """Finish the current line."""
        self._new_line = True
        self._stream.write("\n")
        self._stream.flush()
        return self

    def line(self, *args: Any) -> LogStream:
        """Write all arguments and finish the line."""
        for arg in args:
            self.write(arg)
        return self.end_line()

    def lines(self, items: Iterable[Any]) -> LogStream:
        """Write every item on a line of its own."""
        for item in items:
            self.line(item)
        return self

    def __lshift__(self, arg: Any) -> LogStream:
        return self.write(arg)


info = LogStream("INFO", _StdStream(_stdout))
debug = LogStream("DEBUG", _StdStream(_stdout))
warn = LogStream("WARNING", _StdStream(_stdout))
err = LogStream("ERROR", _StdStream(_stderr))