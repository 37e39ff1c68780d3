"""Mocked stdin controller.

MockStdin swaps ``sys.stdin`` for the read end of an OS pipe and feeds it
from a line source on a background thread, so code under test that calls
``input()`` or reads ``sys.stdin`` sees scripted user input.

Lifecycle:
    idle --set()--> configured --run()--> running
    running --(source exhausted | cancelled | write failed)--> configured (spent)
    any --restore()--> idle

A spent channel has had its write end closed by the finished feed; call
set() again before the next run().
"""
from __future__ import annotations

import codecs
import contextlib
import os
import sys
import threading
from collections.abc import Iterable
from typing import Any, Iterator, TextIO

from mockstdin import logs
from mockstdin.cancel import CancelToken
from mockstdin.channel import Channel, PipeFactory
from mockstdin.config import Config, check_delay
from mockstdin.errors import (
    AlreadyRunning,
    ChannelUnavailable,
    InvalidArgument,
    NotConfigured,
)
from mockstdin.feeder import Feeder
from mockstdin.safe_value import SafeValue

log = logs.get_logger(__name__)


class MockStdin:
    """Controller for a mocked ``sys.stdin``.

    Settings (delay, visibility) may change at any time, including while a
    feed runs; each line reads them afresh. set(), run() and restore() are
    serialized by a lifecycle lock that the feeder thread never takes.
    """

    def __init__(
        self,
        *,
        original: TextIO | None = None,
        output: TextIO | None = None,
        pipe_factory: PipeFactory = os.pipe,
        delay: float = 0.0,
        visible: bool = True,
        encoding: str = "utf-8",
        join_timeout: float | None = 5.0,
    ) -> None:
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise InvalidArgument(f"unknown encoding: {encoding!r}") from e

        self._original = original if original is not None else sys.stdin
        self._output = output
        self._pipe_factory = pipe_factory
        self._encoding = encoding
        self._join_timeout = join_timeout

        self._delay: SafeValue[float] = SafeValue(check_delay(delay))
        self._visible: SafeValue[bool] = SafeValue(bool(visible))
        self._running: SafeValue[bool] = SafeValue(False)
        self._error: SafeValue[Exception | None] = SafeValue(None)
        self._done = threading.Event()
        self._done.set()

        self._lifecycle = threading.Lock()
        self._channel: Channel | None = None
        self._source: Iterable[Any] | None = None
        self._feeder: Feeder | None = None
        self._cancel: CancelToken | None = None
        self._spent = False

    @classmethod
    def from_config(cls, cfg: Config, **kwargs: Any) -> MockStdin:
        return cls(
            delay=cfg.delay,
            visible=cfg.visible,
            encoding=cfg.encoding,
            join_timeout=cfg.join_timeout,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_delay(self, d: float) -> None:
        """Pause *d* seconds after each fed line; applies from the next line.

        Raises InvalidArgument for negative values and leaves the delay as is.
        """
        self._delay.set(check_delay(d))

    def set_visibility(self, v: bool) -> None:
        """Echo fed lines to stdout (True) or hide them like a password prompt."""
        self._visible.set(bool(v))

    @property
    def delay(self) -> float:
        return self._delay.get()

    @property
    def visible(self) -> bool:
        return self._visible.get()

    @property
    def running(self) -> bool:
        return self._running.get()

    @property
    def configured(self) -> bool:
        return self._channel is not None

    @property
    def original(self) -> TextIO:
        return self._original

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def set(self, source: Iterable[Any]) -> None:
        """Point ``sys.stdin`` at a fresh pipe that will be fed from *source*.

        *source* is any iterable of lines, usually an open text file. It is
        not closed by the controller. A previous configuration is restored
        first. Raises AlreadyRunning while a feed is active.
        """
        _check_source(source)
        with self._lifecycle:
            if self._running.get():
                raise AlreadyRunning("a feed is running; restore() before set()")
            self._restore_locked()
            try:
                channel = Channel.allocate(self._pipe_factory, self._encoding)
            except ChannelUnavailable as e:
                self._error.set(e)
                log.error("channel allocation failed", error=str(e))
                raise
            self._channel = channel
            self._source = source
            self._spent = False
            self._error.set(None)
            sys.stdin = channel.reader
        log.debug("mocked stdin set", encoding=self._encoding)

    def run(self, cancel: CancelToken | None = None) -> None:
        """Start feeding the configured source in the background.

        Returns immediately. The feed stops early once *cancel* (or any of
        its ancestors) is cancelled; cancellation is observed between lines.
        """
        with self._lifecycle:
            if self._running.get():
                raise AlreadyRunning("a feed is already running")
            if self._channel is None or self._source is None:
                raise NotConfigured("set() a source before run()")
            if self._spent:
                raise NotConfigured("the previous feed used up this channel; set() again")

            token = cancel.child() if cancel is not None else CancelToken()
            self._cancel = token
            self._spent = True
            self._running.set(True)
            self._done.clear()
            self._feeder = Feeder(
                self._channel,
                self._source,
                token,
                delay=self._delay,
                visible=self._visible,
                output=self._current_output,
                on_error=self._record,
                on_done=self._feed_done,
            )
            self._feeder.start()
        log.debug("feed started", delay=self.delay, visible=self.visible)

    def restore(self) -> Exception | None:
        """Stop any feed, put the original ``sys.stdin`` back, release the pipe.

        Blocks until the feeder thread has exited, so err() afterwards covers
        the whole run. Returns the last recorded error, if any; close failures
        are recorded, never raised.
        """
        with self._lifecycle:
            self._restore_locked()
        return self._error.get()

    def err(self) -> Exception | None:
        """Return the last recorded error without blocking."""
        return self._error.get()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the current feed finishes; True if none is running."""
        return self._done.wait(timeout)

    @contextlib.contextmanager
    def feed(
        self,
        source: Iterable[Any],
        cancel: CancelToken | None = None,
        *,
        delay: float | None = None,
        visible: bool | None = None,
    ) -> Iterator[MockStdin]:
        """set() + run() for the duration of a ``with`` block, then restore()."""
        if delay is not None:
            self.set_delay(delay)
        if visible is not None:
            self.set_visibility(visible)
        self.set(source)
        try:
            self.run(cancel)
            yield self
        finally:
            self.restore()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _restore_locked(self) -> None:
        if self._cancel is not None:
            self._cancel.cancel()
            self._cancel = None

        feeder, self._feeder = self._feeder, None
        if feeder is not None and not feeder.join(self._join_timeout):
            # Feeder is stuck writing into a full pipe nobody reads. Closing
            # the read end turns the blocked write into an error.
            log.warning("feeder still blocked, closing pipe reader", timeout=self._join_timeout)
            if self._channel is not None:
                self._record(self._channel.close_reader())
            feeder.join()

        channel, self._channel = self._channel, None
        self._source = None
        self._spent = False
        if channel is None:
            return
        sys.stdin = self._original
        for err in channel.release():
            self._record(err)
        log.debug("mocked stdin restored", error=str(self._error.get() or ""))

    def _record(self, err: Exception | None) -> None:
        if err is not None:
            self._error.set(err)

    def _feed_done(self) -> None:
        self._running.set(False)
        self._done.set()

    def _current_output(self) -> TextIO:
        # resolved per line so pytest's capsys and redirect_stdout are honored
        return self._output if self._output is not None else sys.stdout


def _check_source(source: Any) -> None:
    if source is None:
        raise InvalidArgument("source must not be None")
    if isinstance(source, (str, bytes, bytearray)):
        raise InvalidArgument(
            "source must be an iterable of lines, not a single string; "
            "wrap it in io.StringIO"
        )
    if not isinstance(source, Iterable):
        raise InvalidArgument(f"source must be iterable, got {type(source).__name__}")
