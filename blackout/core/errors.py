"""
Blackout exception hierarchy.

Every error in the system inherits from BlackoutError.
Each subsystem has its own error class for targeted catching.

Usage:
    try:
        report = await source.fetch(...)
    except FetchError as e:
        # Tell the subscriber, keep the schedule
    except BlackoutError as e:
        # Handle any Blackout error
"""


class BlackoutError(Exception):
    """Base exception for all Blackout errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ━━━ Layer 0: Core Errors ━━━


class ConfigError(BlackoutError):
    """Configuration is invalid, missing, or malformed."""

    pass


class StorageError(BlackoutError):
    """Storage backend failure — database errors, corruption, etc."""

    pass


# ━━━ Layer 1: Collaborator Errors ━━━


class FetchError(BlackoutError):
    """The upstream report call failed — network, auth, or malformed body."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, details)


class TransportError(BlackoutError):
    """Message delivery through the messaging platform failed."""

    def __init__(
        self,
        message: str,
        method: str = "",
        details: dict | None = None,
    ):
        self.method = method
        super().__init__(message, details)


# ━━━ Layer 2: Conversation Errors ━━━


class ValidationError(BlackoutError):
    """User input failed format validation (e.g. a malformed schedule time)."""

    def __init__(self, message: str, value: str = "", details: dict | None = None):
        self.value = value
        super().__init__(message, details)


class PreconditionError(BlackoutError):
    """An action was attempted before its required fields were set."""

    def __init__(
        self,
        message: str,
        missing: tuple[str, ...] = (),
        details: dict | None = None,
    ):
        self.missing = missing
        super().__init__(message, details)
