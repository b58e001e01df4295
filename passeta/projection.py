"""Time projection for single-pass and multi-pass jobs.

The engine turns a static time estimate and the live stream of executed
commands into a continuously refined ETA. Once a pass has completed, its true
duration (wall time minus pauses) becomes history, and later passes are
projected from that history blended with the current trajectory.

Two progress signals are tracked side by side: estimated time consumed, as
reported by the dispatch loop, and commands executed. When the estimated time
consumed overruns the static estimate, the estimate is known to be wrong and
the projection switches to command counts.

All mutators are driven sequentially by the single dispatch loop that owns the
job; calling one in the wrong lifecycle state is a no-op. Projections may be
read from other threads.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from collections.abc import Sized
from datetime import datetime
from statistics import mean

from passeta.models import DetectedIssue
from passeta.models import Point
from passeta.models import ProjectionSnapshot
from passeta.models import format_duration
from passeta.sound import SoundEvent
from passeta.state.clock import get_clock
from passeta.state.config import ProjectionConfig
from passeta.types import JobFile
from passeta.types import SecondPassNotifier
from passeta.types import SoundCue
from passeta.types import TimeSource

logger = logging.getLogger(__name__)


def _format_clock_time(timestamp: float) -> str:
    """Format a Unix timestamp as a 12-hour local time, e.g. "3:07 PM"."""
    moment = datetime.fromtimestamp(timestamp)
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{moment.hour % 12 or 12}:{moment.minute:02d} {suffix}"


class TimeProjection:
    """
    Tracks job progress and projects pass and job durations.

    Lifecycle: idle -> running <-> paused -> completed, and back to idle via
    ``reset``. A pass is "started" between ``job_start`` (or ``job_continue``)
    and ``job_end``; projections read zero outside that window.

    Durations are reported in seconds. Timestamps are kept in the time
    source's integer milliseconds.
    """

    def __init__(
        self,
        time_source: TimeSource | None = None,
        notifier: SecondPassNotifier | None = None,
        sound: SoundCue | None = None,
        config: ProjectionConfig | None = None,
        wall_clock: Callable[[], float] | None = None,
    ) -> None:
        """
        Initialize the engine in the idle state.

        Args:
            time_source: Returns monotonic milliseconds. Defaults to the
                process-wide clock.
            notifier: Receives the "starting pass 2" alert.
            sound: Plays the warning cue on execution errors.
            config: Projection tuning. Defaults to ProjectionConfig().
            wall_clock: Returns Unix seconds, used only for the completion
                time quoted in alerts. Defaults to the process-wide clock.
        """
        self._time_source: TimeSource = time_source or get_clock().millis
        self._wall_clock: Callable[[], float] = wall_clock or get_clock().now
        self._notifier = notifier
        self._sound = sound
        self.config = config if config is not None else ProjectionConfig()

        self._completed_pass_times: list[float] = []
        self._original_estimate = 0.0
        self._total_passes = 1
        self._last_log_ms: int | None = None
        self.reset(is_global=True)

    def reset(self, is_global: bool) -> None:
        """
        Return to idle, clearing the current pass.

        Args:
            is_global: Also forget the job as a whole: pass history, the
                original estimate and the job-wide timestamps.
        """
        self._estimated_target = 0.0
        self._estimated_progress = 0.0
        self._start = 0
        self._end = 0
        if is_global:
            self._global_start = 0
            self._global_end = 0
            self._completed_pass_times.clear()
            self._original_estimate = 0.0
        self._pause_begin = 0
        self._cumulated_pause = 0
        self._in_pause = False
        self._completed = False
        self._started = False
        self._executed_count = 0
        self._sent_count = 0
        self._error_count = 0
        self._target_count = 0
        self._continue_correction = 0
        self._last_issue = DetectedIssue.UNKNOWN
        self._last_known_wco = Point.zero()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def job_start(
        self,
        job_file: JobFile,
        queue: Sized,
        is_global: bool,
        total_passes: int = 1,
    ) -> None:
        """
        Start a pass. No-op if a pass is already started.

        Args:
            job_file: Source of the static estimate for one pass.
            queue: Commands enqueued for this pass; its length is the target count.
            is_global: This is the first pass of a new job; starts the job-wide clock
                and declares ``total_passes``.
            total_passes: Passes in the whole job. Segment-based jobs, whose
                passes are flattened into a single sequence, declare 1.
        """
        if self._started:
            return

        if is_global:
            self._total_passes = total_passes

        logger.debug(
            "Job start - pass %d/%d, global=%s",
            len(self._completed_pass_times) + 1,
            self._total_passes,
            is_global,
        )

        if self._original_estimate == 0.0:
            self._original_estimate = job_file.estimated_time

        if self._completed_pass_times:
            self._estimated_target = mean(self._completed_pass_times)
            logger.debug(
                "Using average of %d completed passes: %.1fs (original estimate was %.1fs)",
                len(self._completed_pass_times),
                self._estimated_target,
                self._original_estimate,
            )
        else:
            self._estimated_target = job_file.estimated_time
            logger.debug("First pass - using file estimate: %.1fs", self._estimated_target)

        self._target_count = len(queue)
        self._estimated_progress = 0.0
        self._start = self._time_source()
        if is_global:
            self._global_start = self._start
        self._pause_begin = 0
        self._cumulated_pause = 0
        self._in_pause = False
        self._completed = False
        self._started = True
        self._executed_count = 0
        self._sent_count = 0
        self._error_count = 0
        self._continue_correction = 0
        self._last_issue = DetectedIssue.UNKNOWN
        self._last_known_wco = Point.zero()

    def job_continue(self, job_file: JobFile, position: int, added: int) -> None:
        """
        Resume a job from a mid-sequence position after an interruption.

        Counters are seeded from ``position``; ``added`` commands (e.g. a
        re-homing preamble) are remembered so that ``sent`` and ``executed``
        report only this continuation's contribution. No-op if started.
        """
        if self._started:
            return

        if self._estimated_target == 0.0:
            self._estimated_target = job_file.estimated_time
        if self._target_count == 0:
            self._target_count = job_file.count
        if self._start == 0:
            self._start = self._time_source()
            self._global_start = self._start

        self._pause_begin = 0
        self._in_pause = False
        self._completed = False
        self._started = True
        self._executed_count = position
        self._sent_count = position
        self._last_issue = DetectedIssue.UNKNOWN
        self._continue_correction = added
        logger.debug("Job continue at position %d (%d commands added)", position, added)

    def job_sent(self) -> None:
        """Count a command handed to the transport."""
        if self.in_program:
            self._sent_count += 1

    def job_executed(self, estimated_progress: float) -> None:
        """
        Count a command completed by the device.

        Args:
            estimated_progress: Cumulative estimated time, in seconds, of all
                commands executed so far in this pass.
        """
        if self.in_program:
            self._executed_count += 1
            self._estimated_progress = estimated_progress

    def job_error(self) -> None:
        """Count an execution error and play the warning cue."""
        if self.in_program:
            self._error_count += 1
            if self._sound is not None:
                try:
                    self._sound.play(SoundEvent.WARNING)
                except Exception:
                    logger.warning("Warning cue failed", exc_info=True)

    def job_issue(self, issue: DetectedIssue) -> None:
        """Record the last issue detected for this job."""
        self._last_issue = issue

    def job_pause(self) -> None:
        """Pause the current pass. No-op if not running or already paused."""
        if self.in_program and not self._in_pause:
            self._in_pause = True
            self._pause_begin = self._time_source()

    def job_resume(self) -> None:
        """Resume a paused pass, adding the pause to the excluded time."""
        if self.in_program and self._in_pause:
            self._cumulated_pause += self._time_source() - self._pause_begin
            self._in_pause = False

    def job_end(self, is_global: bool) -> bool:
        """
        Complete the current pass.

        A pause still open at the end is closed first so it is excluded from
        the pass time. The pass's true duration is added to the history when
        positive.

        Args:
            is_global: This is the last pass; also closes the job-wide clock.

        Returns:
            True if a running pass was completed, False if nothing was running.
        """
        if not self.in_program:
            return False

        self.job_resume()
        self._end = self._time_source()

        actual_pass_time = self._true_job_time()
        if actual_pass_time > 0:
            self._completed_pass_times.append(actual_pass_time)
            logger.info(
                "Pass %d/%d completed in %.1fs (estimate was %.1fs), global=%s",
                len(self._completed_pass_times),
                self._total_passes,
                actual_pass_time,
                self._estimated_target,
                is_global,
            )

        if is_global:
            self._global_end = self._end
            logger.info(
                "Job complete in %.1fs, %d passes completed",
                (self._global_end - self._global_start) / 1000,
                len(self._completed_pass_times),
            )

        self._completed = True
        self._started = False

        if (
            not is_global
            and actual_pass_time > 0
            and len(self._completed_pass_times) == 1
            and self._total_passes > 1
        ):
            try:
                self._notify_second_pass()
            except Exception:
                logger.warning("Second pass notification failed", exc_info=True)
        return True

    def _notify_second_pass(self) -> None:
        notifier = self._notifier
        if notifier is None or not notifier.wants_second_pass:
            return

        # The pass just recorded is over: the rest of the job is every pass
        # not yet in the history, each projected at the history average.
        elapsed = self.total_global_job_time
        remaining = mean(self._completed_pass_times) * max(
            0, self._total_passes - len(self._completed_pass_times)
        )
        projected_total = elapsed + remaining
        if projected_total / 60 < notifier.threshold_minutes:
            return

        message = (
            f"Starting Pass 2/{self._total_passes} - "
            f"ETC: {_format_clock_time(self._wall_clock() + remaining)} - "
            f"Total Job Time: {format_duration(projected_total)}"
        )
        notifier.notify_second_pass(projected_total, message)

    # ------------------------------------------------------------------
    # Elapsed time
    # ------------------------------------------------------------------

    def _elapsed_ms(self, start: int, end: int) -> int:
        if self._completed:
            return end - start
        if self._started:
            return self._time_source() - start
        return 0

    @property
    def total_job_time(self) -> float:
        """Wall time of the current pass, pauses included."""
        return self._elapsed_ms(self._start, self._end) / 1000

    @property
    def total_global_job_time(self) -> float:
        """Wall time of the whole job, from the first pass's start."""
        # Between passes the job-wide clock has not been closed yet
        end = self._global_end if self._global_end else self._end
        return self._elapsed_ms(self._global_start, end) / 1000

    def _total_job_pauses(self) -> float:
        paused = self._cumulated_pause
        if self._in_pause:
            paused += self._time_source() - self._pause_begin
        return paused / 1000

    def _true_job_time(self) -> float:
        return self.total_job_time - self._total_job_pauses()

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    @property
    def projected_target(self) -> float:
        """Projected wall time of the current pass, including pauses taken."""
        if not self._started:
            return 0.0

        done = self._estimated_progress
        if done == 0:
            return self._estimated_target

        real = self._true_job_time()
        target = self._estimated_target
        command_progress = (
            self._executed_count / self._target_count if self._target_count > 0 else 0.0
        )

        if done > target and command_progress > 0:
            # The static estimate is already exceeded; only counts are reliable
            projected = real / command_progress
        elif target <= 0:
            projected = mean(self._completed_pass_times) if self._completed_pass_times else real
        elif self._completed_pass_times:
            avg_pass_time = mean(self._completed_pass_times)
            progress_percent = done / target
            if progress_percent < self.config.history_trust_threshold:
                projected = avg_pass_time
            else:
                trajectory = real * target / done
                history_weight = max(0.0, 1.0 - progress_percent)
                projected = avg_pass_time * history_weight + trajectory * progress_percent
        else:
            projected = real * target / done

        return projected + self._total_job_pauses()

    @property
    def projected_time_remaining(self) -> float:
        """Projected time left in the current pass, never negative."""
        if not self.in_program:
            return 0.0
        return max(0.0, self.projected_target - self.total_job_time)

    @property
    def projected_total_time(self) -> float:
        """Projected wall time of the whole job across all passes."""
        if not self._started:
            return 0.0

        single_pass = self.projected_target
        remaining_passes = self._total_passes - len(self._completed_pass_times)
        if self.in_program:
            remaining_passes -= 1

        elapsed = self.total_global_job_time
        current_remaining = self.projected_time_remaining
        future_passes = single_pass * max(0, remaining_passes)
        total = elapsed + current_remaining + future_passes
        self._log_projection(elapsed, current_remaining, remaining_passes, future_passes, total)
        return total

    @property
    def projected_total_time_remaining(self) -> float:
        """Projected time left in the whole job, never negative."""
        if not self._started:
            return 0.0
        return max(0.0, self.projected_total_time - self.total_global_job_time)

    def _log_projection(
        self,
        elapsed: float,
        current_remaining: float,
        remaining_passes: int,
        future_passes: float,
        total: float,
    ) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        now = self._time_source()
        interval_ms = self.config.log_interval_seconds * 1000
        if self._last_log_ms is not None and now - self._last_log_ms < interval_ms:
            return
        self._last_log_ms = now
        logger.debug(
            "Progress: %d/%d commands, estimated progress %.1fs/%.1fs",
            self._executed_count,
            self._target_count,
            self._estimated_progress,
            self._estimated_target,
        )
        logger.debug(
            "Projected total - elapsed: %.1fs, current remaining: %.1fs, "
            "future passes (%d): %.1fs, total: %.1fs",
            elapsed,
            current_remaining,
            remaining_passes,
            future_passes,
            total,
        )

    # ------------------------------------------------------------------
    # Counters and state
    # ------------------------------------------------------------------

    @property
    def in_program(self) -> bool:
        """Whether a pass is started and not yet completed."""
        return self._started and not self._completed

    @property
    def in_pause(self) -> bool:
        return self._in_pause

    @property
    def estimated_target(self) -> float:
        """Static estimate for the current pass, in seconds."""
        return self._estimated_target

    @property
    def original_estimate(self) -> float:
        """The job file's estimate for the first pass of the job."""
        return self._original_estimate

    @property
    def target(self) -> int:
        return self._target_count

    @property
    def sent(self) -> int:
        return self._sent_count - self._continue_correction

    @property
    def executed(self) -> int:
        return self._executed_count - self._continue_correction

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def last_issue(self) -> DetectedIssue:
        return self._last_issue

    @property
    def last_known_wco(self) -> Point:
        """Last known work coordinate offset; only updated while in program."""
        return self._last_known_wco

    @last_known_wco.setter
    def last_known_wco(self, value: Point) -> None:
        if self.in_program:
            self._last_known_wco = value

    @property
    def total_passes(self) -> int:
        return self._total_passes

    @property
    def completed_passes(self) -> int:
        return len(self._completed_pass_times)

    @property
    def pass_history(self) -> tuple[float, ...]:
        """True durations, in seconds, of the passes completed so far."""
        return tuple(self._completed_pass_times)

    def snapshot(self) -> ProjectionSnapshot:
        """Read every projection and counter at once."""
        completed = len(self._completed_pass_times)
        return ProjectionSnapshot(
            in_program=self.in_program,
            in_pause=self._in_pause,
            current_pass=completed + 1 if self.in_program else completed,
            total_passes=self._total_passes,
            estimated_target=self._estimated_target,
            projected_target=self.projected_target,
            projected_time_remaining=self.projected_time_remaining,
            projected_total_time=self.projected_total_time,
            projected_total_time_remaining=self.projected_total_time_remaining,
            total_job_time=self.total_job_time,
            total_global_job_time=self.total_global_job_time,
            target=self._target_count,
            sent=self.sent,
            executed=self.executed,
            errors=self._error_count,
        )
