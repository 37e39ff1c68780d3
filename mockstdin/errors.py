"""Exceptions raised or recorded by the mocked stdin controller.

Each kind also subclasses the closest builtin so callers can catch either
the specific kind or e.g. ValueError / OSError.
"""
from __future__ import annotations


class MockStdinError(Exception):
    """Base class for all mockstdin errors."""


class InvalidArgument(MockStdinError, ValueError):
    """Raised for a missing source or an out-of-range setting."""


class AlreadyRunning(MockStdinError, RuntimeError):
    """Raised when set() or run() is called while a feed is active."""


class NotConfigured(MockStdinError, RuntimeError):
    """Raised when run() is called without a usable configured channel."""


class ChannelUnavailable(MockStdinError, OSError):
    """Raised when the pipe standing in for stdin cannot be created."""


class WriteFailed(MockStdinError, OSError):
    """Recorded when the feeder cannot write a line into the pipe."""


class CloseFailed(MockStdinError, OSError):
    """Recorded when closing a pipe end fails. Never raised to the caller."""


class SourceFailed(MockStdinError, OSError):
    """Recorded when iterating the backing line source raises."""
