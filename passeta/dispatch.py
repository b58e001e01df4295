"""Fire-and-forget execution of side effects.

Notifications and audio cues must never block the command-dispatch loop, and
their failures must never reach it. Work submitted here runs on a small
thread pool; the number of queued or running items is bounded, and work
beyond the bound is dropped rather than queued.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from concurrent.futures import ThreadPoolExecutor
from types import TracebackType
from typing import Any

from passeta.constants import DEFAULT_DISPATCH_MAX_PENDING
from passeta.constants import DEFAULT_DISPATCH_WORKERS

logger = logging.getLogger(__name__)


class BackgroundDispatcher:
    """
    Bounded thread pool for best-effort background work.

    Attributes:
        max_pending: Maximum number of items queued or running at once.
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_DISPATCH_WORKERS,
        max_pending: int = DEFAULT_DISPATCH_MAX_PENDING,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        if max_pending < 1:
            raise ValueError(f"max_pending must be >= 1, got {max_pending}")
        self.max_pending = max_pending
        self._slots = threading.BoundedSemaphore(max_pending)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="passeta")
        self._closed = False

    def submit(self, fn: Callable[..., Any], *args: Any) -> bool:
        """
        Queue work without waiting for it.

        Args:
            fn: Callable to run on a worker thread.
            *args: Positional arguments for ``fn``.

        Returns:
            True if the work was queued, False if it was dropped because the
            dispatcher is full or shut down.
        """
        if self._closed:
            logger.debug("Dispatcher shut down, dropping %s", getattr(fn, "__name__", fn))
            return False
        if not self._slots.acquire(blocking=False):
            logger.debug(
                "Dispatcher full (%d pending), dropping %s",
                self.max_pending,
                getattr(fn, "__name__", fn),
            )
            return False
        try:
            future = self._executor.submit(fn, *args)
        except RuntimeError:
            # Executor shut down between the check and the submit
            self._slots.release()
            return False
        future.add_done_callback(self._on_done)
        return True

    def _on_done(self, future: Future[Any]) -> None:
        self._slots.release()
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.warning("Background task failed: %s", exc, exc_info=exc)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work and optionally wait for queued work to finish."""
        self._closed = True
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "BackgroundDispatcher":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown(wait=True)


_default_dispatcher: BackgroundDispatcher | None = None
_default_lock = threading.Lock()


def get_dispatcher() -> BackgroundDispatcher:
    """Return the process-wide dispatcher, creating it on first use."""
    global _default_dispatcher
    with _default_lock:
        if _default_dispatcher is None:
            _default_dispatcher = BackgroundDispatcher()
        return _default_dispatcher
