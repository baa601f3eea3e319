"""Inference device configuration built from command-line flags."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any

from adaskit.args import parse_devices, parse_value_per_device

__all__ = [
    "Affinity",
    "ThrottleLevel",
    "STREAMS_AUTO",
    "INFERENCE_NUM_THREADS",
    "AFFINITY",
    "NUM_STREAMS",
    "GPU_QUEUE_THROTTLE",
    "ModelConfig",
    "get_user_config",
    "get_min_latency_config",
    "get_common_config",
]

INFERENCE_NUM_THREADS = "INFERENCE_NUM_THREADS"
AFFINITY = "AFFINITY"
NUM_STREAMS = "NUM_STREAMS"
GPU_QUEUE_THROTTLE = "GPU_QUEUE_THROTTLE"
STREAMS_AUTO = "AUTO"


class Affinity(Enum):
    NONE = "NONE"
    CORE = "CORE"
    NUMA = "NUMA"
    HYBRID_AWARE = "HYBRID_AWARE"

    def __str__(self) -> str:
        return self.value


class ThrottleLevel(IntEnum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2

    def __str__(self) -> str:
        return self.name


@dataclass
class ModelConfig:
    """Target device and compile-time properties for a model."""

    device_name: str = ""
    cpu_extensions_path: str = ""
    cl_kernels_config_path: str = ""
    max_async_requests: int = 0
    compiled_model_config: dict[str, Any] = field(default_factory=dict)
    _devices: set[str] = field(default_factory=set, repr=False, compare=False)

    def get_devices(self) -> set[str]:
        """Devices named by ``device_name``; computed once and cached."""
        if not self._devices:
            self._devices.update(parse_devices(self.device_name))
        return set(self._devices)

    def get_legacy_config(self) -> dict[str, str]:
        """The compiled-model properties with every value as a string."""
        return {key: str(value) for key, value in sorted(self.compiled_model_config.items())}


def get_common_config(flags_d: str, flags_nireq: int) -> ModelConfig:
    config = ModelConfig()
    if flags_d:
        config.device_name = flags_d
    config.max_async_requests = flags_nireq
    return config


def get_user_config(
    flags_d: str, flags_nireq: int, flags_nstreams: str, flags_nthreads: int
) -> ModelConfig:
    """Configuration honouring user-given stream and thread counts."""
    config = get_common_config(flags_d, flags_nireq)
    devices = config.get_devices()
    device_nstreams = parse_value_per_device(devices, flags_nstreams)
    properties = config.compiled_model_config
    for device in sorted(devices):
        if device == "CPU":
            if flags_nthreads != 0:
                properties.setdefault(INFERENCE_NUM_THREADS, flags_nthreads)
            properties.setdefault(AFFINITY, Affinity.NONE)
            properties.setdefault(NUM_STREAMS, device_nstreams.get(device, STREAMS_AUTO))
        elif device == "GPU":
            properties.setdefault(NUM_STREAMS, device_nstreams.get(device, STREAMS_AUTO))
            if "MULTI" in flags_d and "CPU" in devices:
                # CPU+GPU runs best when the GPU driver stops busy-polling a CPU thread.
                properties.setdefault(GPU_QUEUE_THROTTLE, ThrottleLevel(1))
    return config


def get_min_latency_config(flags_d: str, flags_nireq: int) -> ModelConfig:
    """Configuration with a single stream on CPU and GPU."""
    config = get_common_config(flags_d, flags_nireq)
    for device in sorted(config.get_devices()):
        if device in ("CPU", "GPU"):
            config.compiled_model_config.setdefault(NUM_STREAMS, 1)
    return config