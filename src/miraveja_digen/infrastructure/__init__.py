"""
Infrastructure layer - Runtime container, sinks, command line and tooling.

This layer depends on both Application and Domain layers.
"""

from . import runtime, testing
from .logging import configure_logging
from .sinks import FileSystemSourceSink, InMemorySourceSink

__all__ = [
    "runtime",
    "testing",
    "configure_logging",
    "InMemorySourceSink",
    "FileSystemSourceSink",
]
