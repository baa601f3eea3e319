"""Helpers for parsing command-line argument values."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Iterable, Sequence

from adaskit import slog

__all__ = [
    "split",
    "parse_devices",
    "parse_value_per_device",
    "string_to_size",
    "parse_layout_string",
    "read_input_files_arguments",
    "parse_input_files_arguments",
]

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def _to_int(text: str) -> int:
    """Parse the leading integer of ``text``, ignoring anything after it."""
    match = _INT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"Not an integer: {text!r}")
    value = int(match.group(1))
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ValueError(f"Integer out of range: {text!r}")
    return value


def split(s: str, delim: str) -> list[str]:
    """Split ``s`` on ``delim``; a trailing empty field is dropped."""
    parts = s.split(delim)
    if parts and parts[-1] == "":
        parts.pop()
    return parts


def parse_devices(device_string: str) -> list[str]:
    """Expand ``HETERO:``/``MULTI:`` device strings into their device names."""
    device_type, colon, rest = device_string.partition(":")
    if colon and device_type in ("HETERO", "MULTI"):
        return [device.split("(", 1)[0] for device in split(rest, ",")]
    return [device_string]


def parse_value_per_device(devices: Iterable[str], values_string: str) -> dict[str, int]:
    """Parse ``<dev>:<value>,...`` or a single ``<value>`` applied to all devices."""
    known = sorted(set(devices))
    result: dict[str, int] = {}
    for item in split(values_string.upper(), ","):
        fields = split(item, ":")
        if len(fields) == 2:
            if fields[0] in known:
                result[fields[0]] = _to_int(fields[1])
        elif len(fields) == 1:
            value = _to_int(fields[0])
            for device in known:
                result[device] = value
        elif fields:
            raise ValueError(f"Unknown string format: {values_string}")
    return dict(sorted(result.items()))


def string_to_size(text: str) -> tuple[int, int]:
    """Parse ``<width>x<height>`` into a ``(width, height)`` pair."""
    parts = split(text, "x")
    if len(parts) != 2:
        raise ValueError("Can't convert string to size. The string must contain exactly one x")
    return _to_int(parts[0]), _to_int(parts[1])


def parse_layout_string(layout_string: str) -> dict[str, str]:
    """Parse ``name:LAYOUT,name:LAYOUT`` or a bare ``LAYOUT`` (keyed by ``""``)."""
    layouts: dict[str, str] = {}
    prefix = ":" if ":" not in layout_string and layout_string else ""
    search = prefix + layout_string
    colon = search.rfind(":")
    while colon != -1:
        start = search.rfind(",")
        name = search[start + 1:colon] if start < colon else search[start + 1:]
        layouts[name] = search[colon + 1:]
        search = search[:start + 1]
        if not search.endswith(","):
            break
        search = search[:-1]
        colon = search.rfind(":")
    if search:
        raise ValueError(f"Can't parse input layout string: {layout_string}")
    return layouts


def read_input_files_arguments(arg: str) -> list[str]:
    """Return the files named by ``arg``: the entries of a directory, or ``arg`` itself."""
    exists = os.path.exists(arg)
    if not exists and not arg.startswith("rtsp:"):
        slog.warn.line("File ", arg, " cannot be opened!")
        return []
    if exists and os.path.isdir(arg):
        try:
            names = os.listdir(arg)
        except OSError:
            slog.warn.line("Directory ", arg, " cannot be opened!")
            return []
        return [f"{arg}/{name}" for name in names]
    return [arg]


def parse_input_files_arguments(argv: Sequence[str] | None = None) -> list[str]:
    """Collect the inputs that follow ``-i``/``--i`` up to the next option."""
    args = sys.argv if argv is None else argv
    files: list[str] = []
    reading = False
    for arg in args:
        if arg in ("-i", "--i"):
            reading = True
            continue
        if not reading:
            continue
        if arg.startswith("-"):
            break
        files.extend(read_input_files_arguments(arg))
    return files