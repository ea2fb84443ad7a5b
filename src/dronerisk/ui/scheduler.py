"""Keyed, cancellable delayed callbacks for transient dashboard feedback.

Toasts, tooltips and notification pulses are dismissed by a callback
scheduled on the asyncio event loop.  At most one callback is pending per
key (target or station id): scheduling again for a key cancels the
previous one, so an old dismissal can never hide newer feedback.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class FeedbackScheduler:
    """Replace-not-stack scheduler keyed by entity id.

    Must be used from the thread running *loop*.  Call :meth:`close` at
    session teardown so no callback fires against discarded state.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._handles: dict[str, asyncio.TimerHandle] = {}
        self._closed = False

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def ensure_ready(self) -> None:
        """Raise ``RuntimeError`` if :meth:`schedule` would fail right now.

        That is the case after :meth:`close`, or when no loop was given and
        none is running in this thread.
        """
        if self._closed:
            raise RuntimeError("FeedbackScheduler is closed")
        self._get_loop()

    def schedule(
        self,
        key: str,
        delay_s: float,
        callback: Callable[..., Any],
        *args: Any,
    ) -> asyncio.TimerHandle:
        """Run ``callback(*args)`` after *delay_s*, replacing any pending one for *key*."""
        if delay_s < 0:
            raise ValueError(f"delay_s must be >= 0, got {delay_s}")
        self.ensure_ready()
        self.cancel(key)
        handle = self._get_loop().call_later(delay_s, self._fire, key, callback, args)
        self._handles[key] = handle
        return handle

    def _fire(self, key: str, callback: Callable[..., Any], args: tuple) -> None:
        self._handles.pop(key, None)
        try:
            callback(*args)
        except Exception:
            logger.exception("Feedback callback error for '%s'", key)

    def cancel(self, key: str) -> bool:
        """Cancel the pending callback for *key*.  Returns True if one was pending."""
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def is_pending(self, key: str) -> bool:
        return key in self._handles

    def pending_keys(self) -> list[str]:
        return list(self._handles)

    def cancel_all(self) -> int:
        """Cancel every pending callback.  Returns how many were cancelled."""
        count = len(self._handles)
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()
        if count:
            logger.debug("Cancelled %d pending feedback callbacks", count)
        return count

    def close(self) -> None:
        """Cancel everything and refuse further scheduling."""
        self.cancel_all()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed
