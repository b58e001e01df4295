"""Application-specific exceptions for passeta.

The projection engine itself never raises for lifecycle misuse: calling a
mutator in the wrong state is a silent no-op. These exceptions cover the
surrounding layers (settings and side-effect collaborators), and the
collaborators catch their own errors before they can reach the dispatch loop.

Exception Hierarchy:
    PassetaError (base)
    ├── ConfigurationError
    └── SideEffectError
        ├── NotificationError
        └── SoundError
"""


class PassetaError(Exception):
    """Base exception for all passeta errors.

    All application-specific exceptions inherit from this class,
    allowing callers to catch all passeta errors with a single handler.
    """


class ConfigurationError(PassetaError):
    """Raised when there is a configuration error.

    Attributes:
        parameter: The configuration parameter that is invalid.
        message: Human-readable error description.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        parameter: str,
        message: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.parameter = parameter
        self.cause = cause
        self.message = message or f"Invalid configuration for '{parameter}'"
        if cause:
            self.message = f"{self.message}: {cause}"
        super().__init__(self.message)


class SideEffectError(PassetaError):
    """Base exception for failed fire-and-forget side effects."""


class NotificationError(SideEffectError):
    """Raised when a push notification could not be delivered.

    Attributes:
        topic: The notification topic that was targeted.
        message: Human-readable error description.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        topic: str,
        message: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.topic = topic
        self.cause = cause
        self.message = message or f"Failed to deliver notification to topic '{topic}'"
        if cause:
            self.message = f"{self.message}: {cause}"
        super().__init__(self.message)


class SoundError(SideEffectError):
    """Raised when an audio cue could not be played.

    Attributes:
        event: Name of the sound event.
        message: Human-readable error description.
    """

    def __init__(self, event: str, message: str | None = None) -> None:
        self.event = event
        self.message = message or f"Failed to play sound for event '{event}'"
        super().__init__(self.message)
