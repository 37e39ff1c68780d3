"""Cooperative cancellation tokens for feeds.

A token is polled by the feeder at every line boundary. Tokens form a tree:
cancelling a parent cancels every child derived from it, and a token created
with a timeout cancels itself once its deadline passes.

    token = CancelToken.with_timeout(0.5)
    stdin.run(token)
"""
from __future__ import annotations

import threading

CANCELLED = "cancelled"
DEADLINE_EXCEEDED = "deadline exceeded"


class CancelToken:
    """Cancellation signal shared between a caller and a feeder thread."""

    def __init__(self, parent: CancelToken | None = None) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._children: list[CancelToken] = []
        self._timer: threading.Timer | None = None
        self._reason: str | None = None
        self._parent = parent
        if parent is not None:
            parent._adopt(self)

    @classmethod
    def with_timeout(
        cls, seconds: float, parent: CancelToken | None = None
    ) -> CancelToken:
        """Return a token that cancels itself after *seconds*."""
        token = cls(parent)
        if token.cancelled:
            return token
        if seconds <= 0:
            token._cancel(DEADLINE_EXCEEDED)
            return token
        timer = threading.Timer(seconds, token._cancel, args=(DEADLINE_EXCEEDED,))
        timer.daemon = True
        with token._lock:
            token._timer = timer
        timer.start()
        return token

    def child(self) -> CancelToken:
        """Derive a token cancelled together with this one."""
        return CancelToken(self)

    def cancel(self) -> None:
        """Cancel this token and all of its children. Idempotent."""
        self._cancel(CANCELLED)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        """``"cancelled"`` or ``"deadline exceeded"`` once cancelled."""
        with self._lock:
            return self._reason

    def wait(self, timeout: float | None = None) -> bool:
        """Block up to *timeout* seconds; return True if cancelled."""
        return self._event.wait(timeout)

    def _adopt(self, child: CancelToken) -> None:
        with self._lock:
            if not self._event.is_set():
                self._children.append(child)
                return
            reason = self._reason
        child._cancel(reason or CANCELLED)

    def _cancel(self, reason: str) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            children, self._children = self._children, []
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        for child in children:
            child._cancel(reason)
        parent = self._parent
        if parent is not None:
            parent._forget(self)

    def _forget(self, child: CancelToken) -> None:
        with self._lock:
            if child in self._children:
                self._children.remove(child)

    def __repr__(self) -> str:
        state = self.reason or "active"
        return f"<CancelToken {state}>"
