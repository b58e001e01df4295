"""Tests for the background dispatcher."""

import logging
import threading

import pytest

from passeta.dispatch import BackgroundDispatcher
from passeta.dispatch import get_dispatcher


class TestBackgroundDispatcher:
    """Tests for BackgroundDispatcher."""

    def test_runs_work(self) -> None:
        """Test that submitted work runs."""
        results: list[int] = []
        with BackgroundDispatcher() as dispatcher:
            assert dispatcher.submit(results.append, 1)
        assert results == [1]

    def test_failure_logged_not_raised(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that an exception in work is logged and swallowed."""
        caplog.set_level(logging.WARNING, logger="passeta.dispatch")

        def boom() -> None:
            raise RuntimeError("network down")

        with BackgroundDispatcher() as dispatcher:
            assert dispatcher.submit(boom)
        assert any("network down" in r.getMessage() for r in caplog.records)

    def test_drops_when_full(self) -> None:
        """Test that work beyond the pending bound is dropped."""
        release = threading.Event()
        dispatcher = BackgroundDispatcher(max_workers=1, max_pending=2)
        try:
            assert dispatcher.submit(release.wait, 5)
            assert dispatcher.submit(release.wait, 5)
            assert not dispatcher.submit(release.wait, 5)
        finally:
            release.set()
            dispatcher.shutdown(wait=True)

    def test_slots_released_after_work(self) -> None:
        """Test that finished work frees its slot."""
        with BackgroundDispatcher(max_workers=1, max_pending=1) as dispatcher:
            done = threading.Event()
            assert dispatcher.submit(done.set)
            assert done.wait(timeout=5)
        # The pool is shut down now; a fresh one accepts work again
        with BackgroundDispatcher(max_workers=1, max_pending=1) as dispatcher:
            assert dispatcher.submit(lambda: None)

    def test_submit_after_shutdown(self) -> None:
        """Test that work submitted after shutdown is dropped."""
        dispatcher = BackgroundDispatcher()
        dispatcher.shutdown()
        assert not dispatcher.submit(lambda: None)

    @pytest.mark.parametrize(("workers", "pending"), [(0, 1), (1, 0)])
    def test_invalid_sizes(self, workers: int, pending: int) -> None:
        """Test that sizes must be positive."""
        with pytest.raises(ValueError):
            BackgroundDispatcher(max_workers=workers, max_pending=pending)

    def test_default_dispatcher_is_shared(self) -> None:
        """Test that the process-wide dispatcher is created once."""
        assert get_dispatcher() is get_dispatcher()
