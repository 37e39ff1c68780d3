"""Background thread streaming source lines into the mocked stdin pipe.

One Feeder runs per feed. It polls its cancel token before pulling each line,
so a cancelled feed never consumes the next line of the source. Delay and
visibility are re-read for every line.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterable, TextIO

from mockstdin.cancel import CancelToken
from mockstdin.channel import Channel
from mockstdin.errors import SourceFailed, WriteFailed
from mockstdin.safe_value import SafeValue

log = logging.getLogger(__name__)


def normalize_line(raw: Any, encoding: str) -> str:
    """Drop one trailing newline (and a CR before it); decode bytes."""
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode(encoding)
    line = str(raw)
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


class Feeder:
    """Write the lines of *source* into *channel* on a daemon thread.

    on_error receives every failure (write, echo, source, close). on_done is
    called exactly once, after the write end has been closed.
    """

    def __init__(
        self,
        channel: Channel,
        source: Iterable[Any],
        token: CancelToken,
        delay: SafeValue[float],
        visible: SafeValue[bool],
        output: Callable[[], TextIO],
        on_error: Callable[[Exception], None],
        on_done: Callable[[], None],
    ) -> None:
        self._channel = channel
        self._source = source
        self._token = token
        self._delay = delay
        self._visible = visible
        self._output = output
        self._on_error = on_error
        self._on_done = on_done
        self._thread: threading.Thread | None = None
        self.lines_written = 0

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self._run, name="mockstdin-feeder", daemon=True
        )
        self._thread.start()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the thread; return True once it has exited."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run(self) -> None:
        try:
            self._feed()
        except Exception as e:
            log.exception("feeder failed")
            self._on_error(e)
        finally:
            err = self._channel.close_writer()
            if err is not None:
                self._on_error(err)
            log.debug(
                "feed finished",
                extra={
                    "lines": self.lines_written,
                    "cancelled": self._token.cancelled,
                },
            )
            self._on_done()

    def _feed(self) -> None:
        try:
            lines = iter(self._source)
        except Exception as e:
            err = SourceFailed(f"source cannot be iterated: {e}")
            err.__cause__ = e
            self._on_error(err)
            return

        while True:
            if self._token.cancelled:
                log.debug("feed cancelled", extra={"reason": self._token.reason})
                return
            try:
                line = normalize_line(next(lines), self._channel.encoding)
            except StopIteration:
                return
            except Exception as e:
                err = SourceFailed(f"reading source failed: {e}")
                err.__cause__ = e
                self._on_error(err)
                return

            try:
                self._channel.write_line(line)
            except WriteFailed as e:
                log.warning("feed write failed", extra={"error": str(e)})
                self._on_error(e)
                return
            self.lines_written += 1

            if self._visible.get():
                self._echo(line)

            delay = self._delay.get()
            if delay > 0:
                # a cancel ends the wait early; the next boundary check stops the feed
                self._token.wait(delay)

    def _echo(self, line: str) -> None:
        # a broken echo sink is recorded but the feed goes on
        out = self._output()
        try:
            out.write(line + "\n")
            out.flush()
        except (OSError, ValueError) as e:
            err = WriteFailed(f"echo to output failed: {e}")
            err.__cause__ = e
            log.warning("feed echo failed", extra={"error": str(e)})
            self._on_error(err)
