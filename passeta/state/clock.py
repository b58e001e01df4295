"""Injectable clock for testable time handling.

The projection engine never reads the system clock directly: it takes a
zero-argument time source returning monotonic milliseconds. The clocks in
this module provide such sources, plus a wall-clock reading used only for
human-facing completion times.

Example usage:
    # Production code
    from passeta.state import get_clock

    projection = TimeProjection(time_source=get_clock().millis)

    # Test code
    from passeta.state import FrozenClock

    def test_elapsed():
        clock = FrozenClock(frozen_time=1000.0)
        projection = TimeProjection(time_source=clock.millis)

        clock.advance(60.0)  # one minute later, no real waiting
"""

import time as _time
from typing import Protocol


class Clock(Protocol):
    """Protocol for injectable time sources.

    This enables deterministic testing by allowing tests to provide
    a controlled time source instead of using real wall-clock time.
    """

    def now(self) -> float:
        """Return current time as Unix timestamp (seconds since epoch)."""
        ...

    def millis(self) -> int:
        """Return a monotonic clock value in integer milliseconds.

        This is not affected by system clock adjustments and is suitable
        for measuring elapsed time.
        """
        ...


class SystemClock:
    """Default clock implementation using system time."""

    def now(self) -> float:
        """Return current time as Unix timestamp."""
        return _time.time()

    def millis(self) -> int:
        """Return monotonic milliseconds."""
        return _time.monotonic_ns() // 1_000_000


class FrozenClock:
    """Clock frozen at a specific time for testing.

    Time only moves when the test says so, which makes replaying a job
    (thousands of commands, minutes of simulated time) instantaneous.

    Attributes:
        frozen_time: The frozen Unix timestamp.
        frozen_millis: The frozen monotonic value in milliseconds.

    Example:
        clock = FrozenClock(1700000000.0)
        assert clock.millis() == 0

        clock.advance(0.6)  # Advance by 600 ms
        assert clock.millis() == 600
    """

    def __init__(
        self,
        frozen_time: float | None = None,
        frozen_millis: int = 0,
    ) -> None:
        """Initialize with specific frozen times.

        Args:
            frozen_time: Unix timestamp to freeze at. Defaults to current time.
            frozen_millis: Monotonic milliseconds to freeze at. Defaults to 0.
        """
        self._time = frozen_time if frozen_time is not None else _time.time()
        self._millis = frozen_millis

    def now(self) -> float:
        """Return the frozen time."""
        return self._time

    def millis(self) -> int:
        """Return the frozen monotonic value."""
        return self._millis

    def advance(self, seconds: float) -> None:
        """Advance both readings by the given number of seconds.

        Args:
            seconds: Number of seconds to advance (can be negative).
        """
        self._time += seconds
        self._millis += round(seconds * 1000)

    def set_time(self, timestamp: float) -> None:
        """Set the frozen wall-clock time.

        Args:
            timestamp: Unix timestamp to set.
        """
        self._time = timestamp

    def set_millis(self, value: int) -> None:
        """Set the frozen monotonic value.

        Args:
            value: Monotonic milliseconds to set.
        """
        self._millis = value


class OffsetClock:
    """Clock with a fixed offset from system time.

    Useful for simulating a different time of day in completion-time messages.

    Attributes:
        offset: Seconds to add to system time.
    """

    def __init__(self, offset: float = 0.0) -> None:
        """Initialize with an offset.

        Args:
            offset: Seconds to add to current time (negative for past).
        """
        self._offset = offset

    def now(self) -> float:
        """Return system time plus offset."""
        return _time.time() + self._offset

    def millis(self) -> int:
        """Return system monotonic milliseconds (offset doesn't apply to durations)."""
        return _time.monotonic_ns() // 1_000_000


# Default global clock instance
_default_clock: Clock = SystemClock()


def get_clock() -> Clock:
    """Get the current default clock.

    Returns:
        The currently configured clock instance.
    """
    return _default_clock


def set_clock(clock: Clock) -> None:
    """Set the default clock (primarily for testing).

    Args:
        clock: Clock instance to use as default.
    """
    global _default_clock
    _default_clock = clock


def reset_clock() -> None:
    """Reset the default clock to SystemClock."""
    global _default_clock
    _default_clock = SystemClock()
