"""Frame conversion, image sources, matching, NMS and metrics utilities for driver-assistance camera pipelines."""

__version__ = "0.1.0"