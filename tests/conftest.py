"""Shared test fixtures for passeta tests."""

from collections.abc import Callable
from collections.abc import Generator
from dataclasses import dataclass
from dataclasses import field

import pytest

from passeta.dispatch import BackgroundDispatcher
from passeta.projection import TimeProjection
from passeta.sound import SoundEvent
from passeta.state.clock import FrozenClock

# 2023-11-14 22:13:20 UTC
FROZEN_EPOCH = 1_700_000_000.0


@dataclass
class FakeJobFile:
    """Stand-in for a loaded job file."""

    estimated_time: float
    count: int


@dataclass
class RecordingNotifier:
    """Second-pass notifier that records what it was asked to send."""

    wants_second_pass: bool = True
    threshold_minutes: float = 1.0
    sent: list[tuple[float, str]] = field(default_factory=list)

    def notify_second_pass(self, projected_total: float, message: str) -> bool:
        self.sent.append((projected_total, message))
        return True


@dataclass
class RecordingSound:
    """Sound cue that records requested events."""

    played: list[SoundEvent] = field(default_factory=list)

    def play(self, event: SoundEvent) -> bool:
        self.played.append(event)
        return True


RunCommands = Callable[..., None]


@pytest.fixture
def clock() -> FrozenClock:
    """A frozen clock starting at monotonic 0."""
    return FrozenClock(frozen_time=FROZEN_EPOCH)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def sound() -> RecordingSound:
    return RecordingSound()


@pytest.fixture
def projection(
    clock: FrozenClock, notifier: RecordingNotifier, sound: RecordingSound
) -> TimeProjection:
    """A projection engine driven by the frozen clock."""
    return TimeProjection(
        time_source=clock.millis,
        notifier=notifier,
        sound=sound,
        wall_clock=clock.now,
    )


@pytest.fixture
def run_commands(clock: FrozenClock) -> RunCommands:
    """Simulate commands executing at a constant rate.

    Call as ``run_commands(projection, start, stop, seconds_per_command,
    estimated_per_command)``: executes commands ``start`` to ``stop - 1``,
    each taking ``seconds_per_command`` of wall time and reporting a
    cumulative estimated progress of ``(i + 1) * estimated_per_command``.
    """

    def run(
        projection: TimeProjection,
        start: int,
        stop: int,
        seconds_per_command: float = 0.6,
        estimated_per_command: float = 0.6,
    ) -> None:
        for i in range(start, stop):
            clock.advance(seconds_per_command)
            projection.job_executed((i + 1) * estimated_per_command)

    return run


@pytest.fixture
def dispatcher() -> Generator[BackgroundDispatcher, None, None]:
    """A private dispatcher, drained and shut down after the test."""
    pool = BackgroundDispatcher(max_workers=1, max_pending=4)
    yield pool
    pool.shutdown(wait=True)
