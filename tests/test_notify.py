"""Tests for ntfy push notifications."""

import logging

import httpx
import pytest

from passeta.dispatch import BackgroundDispatcher
from passeta.exceptions import NotificationError
from passeta.notify import NtfyMessage
from passeta.notify import NtfyNotifier
from passeta.state.config import NotificationConfig


class RecordingServer:
    """httpx handler standing in for an ntfy server."""

    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code)


def _notifier(
    dispatcher: BackgroundDispatcher,
    server: RecordingServer,
    **overrides: object,
) -> NtfyNotifier:
    settings: dict[str, object] = {
        "enabled": True,
        "topic": "laser-shop",
        "threshold_minutes": 1,
        "second_pass_enabled": True,
    }
    settings.update(overrides)
    return NtfyNotifier(
        NotificationConfig(**settings),  # type: ignore[arg-type]
        dispatcher=dispatcher,
        transport=httpx.MockTransport(server),
    )


class TestNotifyJobComplete:
    """Tests for completion notifications."""

    def test_sends_completion(self, dispatcher: BackgroundDispatcher) -> None:
        """Test a completion message is posted with completion headers."""
        server = RecordingServer()
        notifier = _notifier(dispatcher, server)
        assert notifier.notify_job_complete(120.0, "Job finished in 2m 0s")
        dispatcher.shutdown(wait=True)

        assert len(server.requests) == 1
        request = server.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://ntfy.sh/laser-shop"
        assert request.content == b"Job finished in 2m 0s"
        assert request.headers["Title"] == "Job Complete"
        assert request.headers["Priority"] == "high"
        assert request.headers["Tags"] == "white_check_mark,fire"

    def test_below_threshold_dropped(self, dispatcher: BackgroundDispatcher) -> None:
        """Test that short jobs do not notify."""
        server = RecordingServer()
        notifier = _notifier(dispatcher, server, threshold_minutes=5)
        assert not notifier.notify_job_complete(120.0, "done")
        dispatcher.shutdown(wait=True)
        assert server.requests == []

    def test_disabled_dropped(self, dispatcher: BackgroundDispatcher) -> None:
        """Test that nothing is sent when notifications are disabled."""
        server = RecordingServer()
        notifier = _notifier(dispatcher, server, enabled=False)
        assert not notifier.notify_job_complete(600.0, "done")
        assert not notifier.notify_job_error("Job Issue: alarm")
        dispatcher.shutdown(wait=True)
        assert server.requests == []


class TestNotifyJobError:
    """Tests for failure notifications."""

    def test_error_ignores_threshold(self, dispatcher: BackgroundDispatcher) -> None:
        """Test that failures are sent regardless of job length."""
        server = RecordingServer()
        notifier = _notifier(dispatcher, server, threshold_minutes=60)
        assert notifier.notify_job_error("Job Issue: machine alarm")
        dispatcher.shutdown(wait=True)

        request = server.requests[0]
        assert request.headers["Title"] == "Job FAILED"
        assert request.headers["Priority"] == "urgent"
        assert request.headers["Tags"] == "warning,rotating_light,x"


class TestNotifySecondPass:
    """Tests for second-pass notifications."""

    def test_sends_second_pass(self, dispatcher: BackgroundDispatcher) -> None:
        """Test the pass 2 title and tags."""
        server = RecordingServer()
        notifier = _notifier(dispatcher, server)
        assert notifier.wants_second_pass
        assert notifier.notify_second_pass(180.0, "Starting Pass 2/3")
        dispatcher.shutdown(wait=True)

        request = server.requests[0]
        assert request.headers["Title"] == "Pass 2"
        assert request.headers["Priority"] == "default"
        assert request.headers["Tags"] == "arrows_counterclockwise,hourglass"

    def test_second_pass_disabled(self, dispatcher: BackgroundDispatcher) -> None:
        """Test that second-pass alerts need their own switch."""
        server = RecordingServer()
        notifier = _notifier(dispatcher, server, second_pass_enabled=False)
        assert not notifier.wants_second_pass
        assert not notifier.notify_second_pass(600.0, "Starting Pass 2/3")
        dispatcher.shutdown(wait=True)
        assert server.requests == []

    def test_second_pass_below_threshold(self, dispatcher: BackgroundDispatcher) -> None:
        """Test that short projected jobs do not alert."""
        server = RecordingServer()
        notifier = _notifier(dispatcher, server, threshold_minutes=10)
        assert not notifier.notify_second_pass(180.0, "Starting Pass 2/3")


class TestNotifyEvent:
    """Tests for notify_event and delivery."""

    def test_blank_topic_dropped(self, dispatcher: BackgroundDispatcher) -> None:
        """Test that a blank topic drops the message."""
        server = RecordingServer()
        notifier = _notifier(dispatcher, server, topic="   ")
        assert not notifier.notify_event("hello")

    def test_explicit_topic(self, dispatcher: BackgroundDispatcher) -> None:
        """Test that an explicit topic overrides the configured one."""
        server = RecordingServer()
        notifier = _notifier(dispatcher, server)
        assert notifier.notify_event("hello", topic=" other ")
        dispatcher.shutdown(wait=True)
        assert str(server.requests[0].url) == "https://ntfy.sh/other"

    def test_server_error_is_swallowed(
        self, dispatcher: BackgroundDispatcher, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that a rejected notification is logged, not raised."""
        caplog.set_level(logging.WARNING, logger="passeta.notify")
        server = RecordingServer(status_code=500)
        notifier = _notifier(dispatcher, server)
        assert notifier.notify_event("hello")
        dispatcher.shutdown(wait=True)
        assert len(server.requests) == 1
        assert any("Notification failed" in r.getMessage() for r in caplog.records)

    def test_send_raises_on_server_error(self, dispatcher: BackgroundDispatcher) -> None:
        """Test that the synchronous send reports rejections."""
        notifier = _notifier(dispatcher, RecordingServer(status_code=403))
        message = NtfyMessage("laser-shop", "hello", "Job Complete", "high", "")
        with pytest.raises(NotificationError) as exc_info:
            notifier.send(message)
        assert exc_info.value.topic == "laser-shop"

    def test_send_wraps_transport_errors(self) -> None:
        """Test that connection failures become NotificationError."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        notifier = NtfyNotifier(
            NotificationConfig(enabled=True, topic="t"),
            transport=httpx.MockTransport(refuse),
        )
        with pytest.raises(NotificationError) as exc_info:
            notifier.send(NtfyMessage("t", "hello", "Job Complete", "high", ""))
        assert isinstance(exc_info.value.cause, httpx.ConnectError)
