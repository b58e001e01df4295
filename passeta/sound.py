"""Best-effort audio cues for machine events.

Cues play on the background dispatcher, one at a time: a cue requested while
another is still playing is dropped. Nothing here ever raises into the caller.
"""

import logging
import shutil
import subprocess
import threading
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from passeta.constants import SYSTEM_SOUND_PLAYERS
from passeta.dispatch import BackgroundDispatcher
from passeta.dispatch import get_dispatcher
from passeta.exceptions import SoundError
from passeta.state.config import SoundConfig

logger = logging.getLogger(__name__)

# Plays one file to completion; raises on failure.
SoundBackend = Callable[[Path], None]


class SoundEvent(Enum):
    """Events that have an associated cue."""

    SUCCESS = "Success"
    WARNING = "Warning"
    FATAL = "Fatal"
    CONNECT = "Connect"
    DISCONNECT = "Disconnect"


def system_backend(path: Path) -> None:
    """Play a file with the first command line player found on PATH.

    Raises:
        SoundError: If no player is available or the player fails.
    """
    for player in SYSTEM_SOUND_PLAYERS:
        executable = shutil.which(player)
        if executable is None:
            continue
        result = subprocess.run(
            [executable, str(path)],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
        if result.returncode != 0:
            raise SoundError(path.stem, f"{player} exited with status {result.returncode}")
        return
    raise SoundError(path.stem, "No audio player available")


class SoundPlayer:
    """
    Plays the configured cue for a SoundEvent.

    Attributes:
        config: Sound settings.
    """

    def __init__(
        self,
        config: SoundConfig,
        dispatcher: BackgroundDispatcher | None = None,
        backend: SoundBackend | None = None,
    ) -> None:
        self.config = config
        self._dispatcher = dispatcher
        self._backend = backend or system_backend
        self._lock = threading.Lock()
        self._busy = False

    @property
    def busy(self) -> bool:
        """Whether a cue is currently playing."""
        return self._busy

    def play(self, event: SoundEvent) -> bool:
        """
        Request the cue for an event without waiting for it.

        Returns:
            True if playback was queued.
        """
        name = event.value
        if not self.config.is_enabled(name):
            return False
        path = self.config.file_for(name)
        if not path.is_file():
            logger.debug("No sound file for %s at %s", name, path)
            return False

        with self._lock:
            if self._busy:
                return False
            self._busy = True

        dispatcher = self._dispatcher or get_dispatcher()
        if not dispatcher.submit(self._play, path):
            self._busy = False
            return False
        return True

    def _play(self, path: Path) -> None:
        try:
            self._backend(path)
        except (SoundError, OSError) as e:
            logger.debug("Could not play %s: %s", path, e)
        finally:
            self._busy = False
