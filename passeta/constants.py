"""Centralized constants for passeta.

This module consolidates configuration defaults and magic numbers used
across multiple modules to ensure consistency and make tuning easier.
"""

# =============================================================================
# Projection
# =============================================================================

#: Fraction of a pass (by estimated progress) below which the historical
#: pass average is trusted outright instead of being blended with the
#: current trajectory.
HISTORY_TRUST_THRESHOLD: float = 0.2

#: Minimum interval between projection debug log lines, in seconds
PROJECTION_LOG_INTERVAL_SECONDS: float = 2.0

# =============================================================================
# Notifications
# =============================================================================

#: Default ntfy server
DEFAULT_NTFY_SERVER: str = "https://ntfy.sh"

#: HTTP timeout for a notification request, in seconds
NTFY_TIMEOUT_SECONDS: float = 5.0

#: Default minimum job duration, in minutes, for a notification to be sent
DEFAULT_NOTIFY_THRESHOLD_MINUTES: int = 1

#: Substrings that mark a message as a failure report
FAILURE_MARKERS: tuple[str, ...] = ("Issue", "Alarm", "Error")

# =============================================================================
# Background dispatch
# =============================================================================

#: Worker threads used for notifications and audio cues
DEFAULT_DISPATCH_WORKERS: int = 2

#: Maximum queued or running side effects before new ones are dropped
DEFAULT_DISPATCH_MAX_PENDING: int = 16

# =============================================================================
# Sound
# =============================================================================

#: Default directory holding the cue files
DEFAULT_SOUND_DIR: str = "sounds"

#: Command line players tried in order by the default backend
SYSTEM_SOUND_PLAYERS: tuple[str, ...] = ("afplay", "paplay", "aplay")
