"""passeta: progress tracking and time projection for multi-pass machine jobs."""

from importlib.metadata import version

from passeta.dispatch import BackgroundDispatcher
from passeta.models import DetectedIssue
from passeta.models import Point
from passeta.models import ProjectionSnapshot
from passeta.models import format_duration
from passeta.notify import NtfyNotifier
from passeta.projection import TimeProjection
from passeta.sound import SoundEvent
from passeta.sound import SoundPlayer
from passeta.state.config import AppConfig
from passeta.state.config import load_config

__version__ = version("passeta")

__all__ = [
    "AppConfig",
    "BackgroundDispatcher",
    "DetectedIssue",
    "NtfyNotifier",
    "Point",
    "ProjectionSnapshot",
    "SoundEvent",
    "SoundPlayer",
    "TimeProjection",
    "format_duration",
    "load_config",
]
