"""Push notifications through an ntfy server.

Messages are published with a plain HTTP POST of the message body to
``{server}/{topic}``; title, priority and tags travel as headers. Every send
happens on the background dispatcher, and any delivery failure is logged and
dropped.
"""

import logging
from dataclasses import dataclass

import httpx

from passeta.constants import FAILURE_MARKERS
from passeta.dispatch import BackgroundDispatcher
from passeta.dispatch import get_dispatcher
from passeta.exceptions import NotificationError
from passeta.state.config import NotificationConfig

logger = logging.getLogger(__name__)

SECOND_PASS_TITLE = "Pass 2"
SECOND_PASS_TAGS = "arrows_counterclockwise,hourglass"


@dataclass(frozen=True)
class NtfyMessage:
    """A single notification ready to publish."""

    topic: str
    message: str
    title: str
    priority: str
    tags: str


class NtfyNotifier:
    """
    Sends job notifications (completion, failure, second pass) to ntfy.

    Attributes:
        config: Notification settings.
    """

    def __init__(
        self,
        config: NotificationConfig,
        dispatcher: BackgroundDispatcher | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the notifier.

        Args:
            config: Notification settings.
            dispatcher: Where sends run. Defaults to the process-wide dispatcher.
            transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
        """
        self.config = config
        self._dispatcher = dispatcher
        self._transport = transport

    @property
    def wants_second_pass(self) -> bool:
        """Whether second-pass alerts are enabled."""
        return self.config.enabled and self.config.second_pass_enabled

    @property
    def threshold_minutes(self) -> float:
        """Minimum job duration, in minutes, worth notifying about."""
        return self.config.threshold_minutes

    def notify_job_complete(self, job_time: float, message: str) -> bool:
        """Notify a finished job if it ran at least the threshold.

        Args:
            job_time: Job duration in seconds.
            message: Text to publish.

        Returns:
            True if a send was queued.
        """
        if not self.config.enabled or job_time / 60 < self.config.threshold_minutes:
            return False
        return self.notify_event(message)

    def notify_job_error(self, message: str) -> bool:
        """Notify a job failure; the duration threshold does not apply."""
        if not self.config.enabled:
            return False
        return self.notify_event(message)

    def notify_second_pass(self, projected_total: float, message: str) -> bool:
        """Notify that pass 2 of a multi-pass job is starting.

        Args:
            projected_total: Projected duration of the whole job, in seconds.
            message: Text to publish.

        Returns:
            True if a send was queued.
        """
        if not self.wants_second_pass or projected_total / 60 < self.config.threshold_minutes:
            return False
        return self.notify_event(
            message,
            title=SECOND_PASS_TITLE,
            priority="default",
            tags=SECOND_PASS_TAGS,
        )

    def notify_event(
        self,
        message: str,
        topic: str | None = None,
        title: str | None = None,
        priority: str | None = None,
        tags: str | None = None,
    ) -> bool:
        """
        Queue a notification.

        Without an explicit title, the message is classified as a failure
        report if it mentions an issue, alarm or error, and as a completion
        report otherwise.

        Returns:
            True if a send was queued, False if it was dropped.
        """
        topic = (topic if topic is not None else self.config.topic).strip()
        if not topic:
            logger.debug("No notification topic configured, dropping: %s", message)
            return False

        if title is None:
            failed = any(marker in message for marker in FAILURE_MARKERS)
            title = "Job FAILED" if failed else "Job Complete"
            priority = priority or ("urgent" if failed else "high")
            tags = tags or ("warning,rotating_light,x" if failed else "white_check_mark,fire")

        ntfy = NtfyMessage(
            topic=topic,
            message=message,
            title=title,
            priority=priority or "default",
            tags=tags or "",
        )
        dispatcher = self._dispatcher or get_dispatcher()
        return dispatcher.submit(self._deliver, ntfy)

    def _deliver(self, ntfy: NtfyMessage) -> None:
        try:
            self.send(ntfy)
        except NotificationError as e:
            logger.warning("Notification failed: %s", e.message)

    def send(self, ntfy: NtfyMessage) -> None:
        """
        Publish a message synchronously.

        Raises:
            NotificationError: If the request fails or the server rejects it.
        """
        url = f"{self.config.server.rstrip('/')}/{ntfy.topic}"
        headers = {"Title": ntfy.title, "Priority": ntfy.priority}
        if ntfy.tags:
            headers["Tags"] = ntfy.tags
        try:
            with httpx.Client(timeout=self.config.timeout, transport=self._transport) as client:
                response = client.post(url, content=ntfy.message.encode("utf-8"), headers=headers)
        except httpx.HTTPError as e:
            raise NotificationError(ntfy.topic, cause=e) from e
        if response.is_error:
            raise NotificationError(
                ntfy.topic, f"ntfy server answered {response.status_code} for topic '{ntfy.topic}'"
            )
        logger.debug("Notification sent to %s: %s", ntfy.topic, ntfy.title)
