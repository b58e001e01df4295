"""Type aliases and collaborator protocols.

The projection engine talks to the rest of the machine-control application
only through the small interfaces defined here, so any object with the right
shape (a real job file, a test double) can be plugged in.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING
from typing import Protocol

if TYPE_CHECKING:
    from passeta.sound import SoundEvent

# Zero-argument function returning monotonic milliseconds.
TimeSource = Callable[[], int]


class JobFile(Protocol):
    """Static description of the command sequence about to run.

    Attributes:
        estimated_time: Estimated total duration in seconds.
        count: Number of commands in the sequence.
    """

    @property
    def estimated_time(self) -> float: ...

    @property
    def count(self) -> int: ...


class SecondPassNotifier(Protocol):
    """Receiver for the "starting pass 2" alert."""

    @property
    def wants_second_pass(self) -> bool:
        """Whether second-pass alerts are enabled at all."""
        ...

    @property
    def threshold_minutes(self) -> float:
        """Minimum projected job duration, in minutes, worth an alert."""
        ...

    def notify_second_pass(self, projected_total: float, message: str) -> bool:
        """Send the alert without blocking the caller; True if queued."""
        ...


class SoundCue(Protocol):
    """Receiver for audio cues; must return immediately."""

    def play(self, event: "SoundEvent") -> bool: ...
