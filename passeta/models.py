"""Data models for job timing and machine state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DetectedIssue(Enum):
    """Last issue reported by the machine-control loop for the running job."""

    UNKNOWN = "unknown"
    MANUAL_RESET = "manual_reset"
    MANUAL_DISCONNECT = "manual_disconnect"
    MANUAL_ABORT = "manual_abort"
    STOP_MOVING = "stop_moving"
    STOP_RESPONDING = "stop_responding"
    UNEXPECTED_RESET = "unexpected_reset"
    UNEXPECTED_DISCONNECT = "unexpected_disconnect"
    MACHINE_ALARM = "machine_alarm"


@dataclass(frozen=True)
class Point:
    """A machine coordinate, used for the work coordinate offset."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def zero(cls) -> Point:
        """Return the origin."""
        return cls()


@dataclass(frozen=True)
class ProjectionSnapshot:
    """
    A single read of every projection and counter of a running job.

    All durations are in seconds.

    Attributes:
        in_program: Whether a pass is started and not yet completed.
        in_pause: Whether the current pass is paused.
        current_pass: 1-based number of the pass in progress (or last run).
        total_passes: Declared number of passes for the whole job.
        estimated_target: Static estimate for the current pass.
        projected_target: Projected duration of the current pass.
        projected_time_remaining: Projected time left in the current pass.
        projected_total_time: Projected duration of the whole job.
        projected_total_time_remaining: Projected time left in the whole job.
        total_job_time: Wall time elapsed in the current pass.
        total_global_job_time: Wall time elapsed in the whole job.
        target: Commands to run in the current pass.
        sent: Commands handed to the transport.
        executed: Commands completed by the device.
        errors: Errors reported during the current pass.
    """

    in_program: bool
    in_pause: bool
    current_pass: int
    total_passes: int
    estimated_target: float
    projected_target: float
    projected_time_remaining: float
    projected_total_time: float
    projected_total_time_remaining: float
    total_job_time: float
    total_global_job_time: float
    target: int
    sent: int
    executed: int
    errors: int

    @property
    def progress_percent(self) -> float:
        """Percentage of commands executed, 0 when the target is unknown."""
        if self.target <= 0:
            return 0.0
        return self.executed / self.target * 100


def format_duration(seconds: float) -> str:
    """
    Format a duration compactly for notifications.

    Args:
        seconds: Duration in seconds.

    Returns:
        "1h 5m" at one hour or more, "5m 30s" at one minute or more,
        otherwise "42s". Components are truncated, not rounded.
    """
    total = int(max(0.0, seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours >= 1:
        return f"{hours}h {minutes}m"
    if minutes >= 1:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
