"""Components for tracking and controlling Steam, display resolutions and power state on Linux."""

__version__ = "0.1.0"