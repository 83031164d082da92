"""Mock classes for unit testing the fixture caches and step definitions."""

from .mock_driver import MockDriver

__all__ = [
    "MockDriver",
]
