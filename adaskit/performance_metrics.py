"""Latency and frame-rate statistics over a moving time window."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass

from adaskit import slog

__all__ = ["Metrics", "PerformanceMetrics", "log_latency_per_stage"]


@dataclass(frozen=True)
class Metrics:
    """Mean latency in milliseconds and frames per second."""

    latency: float
    fps: float


@dataclass
class _Statistic:
    latency: float = 0.0
    period: float = 0.0
    frame_count: int = 0

    def combine(self, other: _Statistic) -> None:
        self.latency += other.latency
        self.period += other.period
        self.frame_count += other.frame_count


class PerformanceMetrics:
    """Tracks per-frame latency; the "last" figures cover one time window.

    Time points are values of :func:`time.monotonic`, in seconds.
    """

    def __init__(self, time_window: float = 1.0) -> None:
        self.time_window = time_window
        self._last_moving = _Statistic()
        self._current_moving = _Statistic()
        self._total = _Statistic()
        self._last_update_time = 0.0
        self._first_frame_processed = False

    def update(self, last_request_start_time: float) -> None:
        """Record a frame whose processing started at ``last_request_start_time``."""
        current_time = time.monotonic()

        if not self._first_frame_processed:
            self._last_update_time = last_request_start_time
            self._first_frame_processed = True

        self._current_moving.latency += current_time - last_request_start_time
        self._current_moving.period = current_time - self._last_update_time
        self._current_moving.frame_count += 1

        if current_time - self._last_update_time > self.time_window:
            self._last_moving = self._current_moving
            self._total.combine(self._last_moving)
            self._current_moving = _Statistic()
            self._last_update_time = current_time

    def get_last(self) -> Metrics:
        """Metrics of the last completed time window; NaN where nothing is known."""
        stat = self._last_moving
        latency = stat.latency * 1000.0 / stat.frame_count if stat.frame_count else math.nan
        fps = stat.frame_count / stat.period if stat.period != 0 else math.nan
        return Metrics(latency, fps)

    def get_total(self) -> Metrics:
        """Metrics over every frame recorded so far."""
        frame_count = self._total.frame_count + self._current_moving.frame_count
        if frame_count == 0:
            return Metrics(math.nan, math.nan)
        latency = (self._total.latency + self._current_moving.latency) * 1000.0 / frame_count
        period = self._total.period + self._current_moving.period
        fps = frame_count / period if period != 0 else math.inf
        return Metrics(latency, fps)

    def log_total(self) -> None:
        """Log the total latency and frame rate."""
        metrics = self.get_total()
        slog.info.line("\tLatency: ", f"{metrics.latency:.1f}", " ms")
        slog.info.line("\tFPS: ", f"{metrics.fps:.1f}")


def log_latency_per_stage(
    read_lat: float,
    preproc_lat: float,
    infer_lat: float,
    postproc_lat: float,
    render_lat: float,
) -> None:
    """Log the latency of each pipeline stage in milliseconds."""
    stages = (
        ("Decoding", read_lat),
        ("Preprocessing", preproc_lat),
        ("Inference", infer_lat),
        ("Postprocessing", postproc_lat),
        ("Rendering", render_lat),
    )
    for name, value in stages:
        slog.info.line(f"\t{name}:\t", f"{value:.1f}", " ms")