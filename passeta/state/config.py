"""Configuration for projection, notifications and audio cues.

Settings files are flat JSON objects keyed with dotted names, for example::

    {
        "Ntfy.Enabled": true,
        "Ntfy.Topic": "my-laser",
        "Ntfy.Threshold": 10,
        "Ntfy.SecondPass": true,
        "Sound.Warning.Enabled": false,
        "Sound.Success": "/usr/share/sounds/done.wav",
        "Projection.HistoryThreshold": 0.25
    }

Missing keys take their defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any

from passeta.constants import DEFAULT_NOTIFY_THRESHOLD_MINUTES
from passeta.constants import DEFAULT_NTFY_SERVER
from passeta.constants import DEFAULT_SOUND_DIR
from passeta.constants import HISTORY_TRUST_THRESHOLD
from passeta.constants import NTFY_TIMEOUT_SECONDS
from passeta.constants import PROJECTION_LOG_INTERVAL_SECONDS
from passeta.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Sound event names as they appear in settings keys
SOUND_EVENT_NAMES: tuple[str, ...] = ("Success", "Warning", "Fatal", "Connect", "Disconnect")


@dataclass(frozen=True)
class NotificationConfig:
    """
    Push notification settings.

    Attributes:
        enabled: Master switch for all notifications.
        topic: ntfy topic to publish to; blank disables sending.
        threshold_minutes: Jobs shorter than this do not notify.
        second_pass_enabled: Whether to alert when pass 2 of a multi-pass job starts.
        server: Base URL of the ntfy server.
        timeout: HTTP timeout in seconds.
    """

    enabled: bool = False
    topic: str = ""
    threshold_minutes: float = DEFAULT_NOTIFY_THRESHOLD_MINUTES
    second_pass_enabled: bool = False
    server: str = DEFAULT_NTFY_SERVER
    timeout: float = NTFY_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if self.threshold_minutes < 0:
            raise ConfigurationError("threshold_minutes", "Notification threshold must be >= 0")
        if self.timeout <= 0:
            raise ConfigurationError("timeout", "Notification timeout must be positive")
        if not self.server.startswith(("http://", "https://")):
            raise ConfigurationError(
                "server", f"Unsupported notification server URL: {self.server}"
            )


@dataclass(frozen=True)
class SoundConfig:
    """
    Audio cue settings.

    Attributes:
        enabled: Per-event switch keyed by event name (e.g. "Warning"); absent means enabled.
        files: Per-event file override keyed by event name.
        sound_dir: Directory that relative file names are resolved against.
    """

    enabled: dict[str, bool] = field(default_factory=dict)
    files: dict[str, str] = field(default_factory=dict)
    sound_dir: Path = Path(DEFAULT_SOUND_DIR)

    def is_enabled(self, name: str) -> bool:
        """Whether the cue for the named event may play."""
        return self.enabled.get(name, True)

    def file_for(self, name: str) -> Path:
        """Resolve the cue file for the named event."""
        path = Path(self.files.get(name, f"{name.lower()}.wav"))
        return path if path.is_absolute() else self.sound_dir / path


@dataclass(frozen=True)
class ProjectionConfig:
    """
    Tuning for the projection engine.

    Attributes:
        history_trust_threshold: Pass progress below which the historical
            pass average is used as is.
        log_interval_seconds: Minimum spacing of projection debug logs.
    """

    history_trust_threshold: float = HISTORY_TRUST_THRESHOLD
    log_interval_seconds: float = PROJECTION_LOG_INTERVAL_SECONDS

    def __post_init__(self) -> None:
        if not 0.0 < self.history_trust_threshold < 1.0:
            raise ConfigurationError(
                "history_trust_threshold",
                f"History trust threshold must be in (0, 1), got {self.history_trust_threshold}",
            )
        if self.log_interval_seconds < 0:
            raise ConfigurationError("log_interval_seconds", "Log interval must be >= 0")


@dataclass(frozen=True)
class AppConfig:
    """All settings consumed by passeta."""

    notification: NotificationConfig = field(default_factory=NotificationConfig)
    sound: SoundConfig = field(default_factory=SoundConfig)
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)


DEFAULT_CONFIG = AppConfig()


def _typed(settings: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    """Fetch a settings value, checking its JSON type."""
    if key not in settings:
        return default
    value = settings[key]
    # bool is an int subclass; a JSON true must not pass as a number
    if kind in (int, float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError(key, f"Expected a number for '{key}', got {value!r}")
        return value
    if not isinstance(value, kind):
        raise ConfigurationError(key, f"Expected {kind.__name__} for '{key}', got {value!r}")
    return value


def config_from_settings(settings: dict[str, Any], base_dir: Path | None = None) -> AppConfig:
    """
    Build an AppConfig from a flat dotted-key settings mapping.

    Args:
        settings: Mapping such as the one parsed from a settings file.
        base_dir: Directory relative sound paths are resolved against.

    Returns:
        The validated configuration.
    """
    notification = NotificationConfig(
        enabled=_typed(settings, "Ntfy.Enabled", bool, False),
        topic=_typed(settings, "Ntfy.Topic", str, "").strip(),
        threshold_minutes=_typed(
            settings, "Ntfy.Threshold", float, DEFAULT_NOTIFY_THRESHOLD_MINUTES
        ),
        second_pass_enabled=_typed(settings, "Ntfy.SecondPass", bool, False),
        server=_typed(settings, "Ntfy.Server", str, DEFAULT_NTFY_SERVER).rstrip("/"),
    )

    enabled: dict[str, bool] = {}
    files: dict[str, str] = {}
    for name in SOUND_EVENT_NAMES:
        key = f"Sound.{name}.Enabled"
        if key in settings:
            enabled[name] = _typed(settings, key, bool, True)
        key = f"Sound.{name}"
        if key in settings:
            files[name] = _typed(settings, key, str, "")
    sound_dir = Path(DEFAULT_SOUND_DIR)
    if base_dir is not None:
        sound_dir = base_dir / sound_dir
    sound = SoundConfig(enabled=enabled, files=files, sound_dir=sound_dir)

    projection = ProjectionConfig(
        history_trust_threshold=_typed(
            settings, "Projection.HistoryThreshold", float, HISTORY_TRUST_THRESHOLD
        ),
    )

    return AppConfig(notification=notification, sound=sound, projection=projection)


def load_config(path: Path) -> AppConfig:
    """
    Load configuration from a JSON settings file.

    Relative sound paths resolve against a ``sounds`` directory beside the file.

    Args:
        path: Path to the settings file.

    Returns:
        The validated configuration.

    Raises:
        ConfigurationError: If the file is missing, unreadable, not a JSON
            object, or holds invalid values.
    """
    try:
        content = path.read_text()
    except FileNotFoundError as e:
        raise ConfigurationError(str(path), f"Settings file not found at {path}") from e
    except OSError as e:
        raise ConfigurationError(str(path), f"Could not read settings file {path}", e) from e

    try:
        settings = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigurationError(str(path), f"Malformed settings file {path}", e) from e

    if not isinstance(settings, dict):
        raise ConfigurationError(str(path), f"Settings file {path} must hold a JSON object")

    config = config_from_settings(settings, base_dir=path.parent)
    logger.debug("Loaded settings from %s", path)
    return config
