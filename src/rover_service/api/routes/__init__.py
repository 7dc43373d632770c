"""Route modules."""

from . import config, devices, rover

__all__ = [
    "config",
    "devices",
    "rover",
]
