"""OS pipe standing in for stdin.

The read end is wrapped as a text stream so it can be assigned to
``sys.stdin``; the write end stays an unbuffered binary stream so a failed
write surfaces on the line that caused it instead of on a later flush.
"""
from __future__ import annotations

import codecs
import io
import logging
import os
from typing import BinaryIO, Callable, TextIO

from mockstdin.errors import (
    ChannelUnavailable,
    CloseFailed,
    InvalidArgument,
    WriteFailed,
)

log = logging.getLogger(__name__)

PipeFactory = Callable[[], "tuple[int, int]"]


class Channel:
    """A connected (reader, writer) pair created from one OS pipe."""

    def __init__(self, reader: TextIO, writer: BinaryIO, encoding: str) -> None:
        self.reader = reader
        self.writer = writer
        self.encoding = encoding

    @classmethod
    def allocate(
        cls, pipe_factory: PipeFactory = os.pipe, encoding: str = "utf-8"
    ) -> Channel:
        """Create a fresh pipe pair.

        Raises InvalidArgument for an unknown encoding and ChannelUnavailable
        if the pipe cannot be created. Descriptors opened before a failure are
        closed again.
        """
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise InvalidArgument(f"unknown encoding: {encoding!r}") from e
        try:
            r_fd, w_fd = pipe_factory()
        except OSError as e:
            raise ChannelUnavailable(f"os.pipe unavailable: {e}") from e
        if r_fd is None or w_fd is None or r_fd < 0 or w_fd < 0:
            _close_fds(r_fd, w_fd)
            raise ChannelUnavailable(
                f"os.pipe returned invalid descriptors ({r_fd}, {w_fd})"
            )

        reader: TextIO | None = None
        try:
            reader = open(r_fd, "r", encoding=encoding)
            writer = open(w_fd, "wb", buffering=0)
        except OSError as e:
            if reader is not None:
                # reader owns r_fd now
                reader.close()
                _close_fds(w_fd)
            else:
                _close_fds(r_fd, w_fd)
            raise ChannelUnavailable(f"cannot open pipe ends: {e}") from e

        log.debug("channel allocated", extra={"read_fd": r_fd, "write_fd": w_fd})
        return cls(reader, writer, encoding)

    def write_line(self, text: str) -> None:
        """Write *text* plus a newline, looping over partial writes."""
        try:
            data = memoryview((text + "\n").encode(self.encoding))
            while data:
                n = self.writer.write(data)
                if n is None:
                    # only happens for non-blocking descriptors
                    raise BlockingIOError("pipe write would block")
                data = data[n:]
        except (OSError, ValueError) as e:
            raise WriteFailed(f"write to mocked stdin failed: {e}") from e

    @property
    def writer_closed(self) -> bool:
        return self.writer.closed

    def close_reader(self) -> CloseFailed | None:
        return _close(self.reader, "reader")

    def close_writer(self) -> CloseFailed | None:
        """Close the write end; consumers see EOF once the pipe drains."""
        return _close(self.writer, "writer")

    def release(self) -> list[CloseFailed]:
        """Close the read end, then the write end.

        Ends that are already closed are skipped. Close failures are returned
        rather than raised.
        """
        errors = [e for e in (self.close_reader(), self.close_writer()) if e]
        log.debug("channel released", extra={"errors": len(errors)})
        return errors


def _close(stream: io.IOBase, name: str) -> CloseFailed | None:
    if stream.closed:
        return None
    try:
        stream.close()
    except OSError as e:
        log.warning("closing pipe end failed", extra={"end": name, "error": str(e)})
        err = CloseFailed(f"closing pipe {name} failed: {e}")
        err.__cause__ = e
        return err
    return None


def _close_fds(*fds: int | None) -> None:
    for fd in fds:
        if fd is None or fd < 0:
            continue
        try:
            os.close(fd)
        except OSError:
            pass
