"""Scripted input for interactive console programs under test.

``mockstdin.stdin`` is the process-wide controller; it captured
``sys.stdin`` when this package was first imported. Tests usually take a
fresh controller from the ``mock_stdin`` pytest fixture instead.
"""

from mockstdin.cancel import CancelToken
from mockstdin.config import Config, load
from mockstdin.errors import (
    AlreadyRunning,
    ChannelUnavailable,
    CloseFailed,
    InvalidArgument,
    MockStdinError,
    NotConfigured,
    SourceFailed,
    WriteFailed,
)
from mockstdin.stdin import MockStdin

stdin = MockStdin()

__all__ = [
    "AlreadyRunning",
    "CancelToken",
    "ChannelUnavailable",
    "CloseFailed",
    "Config",
    "InvalidArgument",
    "MockStdin",
    "MockStdinError",
    "NotConfigured",
    "SourceFailed",
    "WriteFailed",
    "load",
    "stdin",
]
