"""Injectable clock and configuration."""

from passeta.state.clock import Clock
from passeta.state.clock import FrozenClock
from passeta.state.clock import OffsetClock
from passeta.state.clock import SystemClock
from passeta.state.clock import get_clock
from passeta.state.clock import reset_clock
from passeta.state.clock import set_clock
from passeta.state.config import DEFAULT_CONFIG
from passeta.state.config import AppConfig
from passeta.state.config import NotificationConfig
from passeta.state.config import ProjectionConfig
from passeta.state.config import SoundConfig
from passeta.state.config import load_config

__all__ = [
    "AppConfig",
    "Clock",
    "DEFAULT_CONFIG",
    "FrozenClock",
    "NotificationConfig",
    "OffsetClock",
    "ProjectionConfig",
    "SoundConfig",
    "SystemClock",
    "get_clock",
    "load_config",
    "reset_clock",
    "set_clock",
]
