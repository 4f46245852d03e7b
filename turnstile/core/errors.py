"""
Error Taxonomy.

Every failure that aborts a run derives from TurnstileError so the CLI can
report it uniformly. Waiting for busy devices is not an error and has no
exception here: the scheduler models it as an InsufficientResources outcome.
"""

from typing import Optional


class TurnstileError(Exception):
    """Base class for all fatal run errors."""


class ConfigurationError(TurnstileError):
    """Invalid CLI or YAML configuration."""


class InvalidTemplateSyntax(TurnstileError):
    """
    Malformed bracket span in a command argument.

    Raised before any device is touched; never retried.

    Attributes:
        span: The offending run of brace characters.
        token: The full argument the span was found in.
    """

    def __init__(self, span: str, token: str):
        self.span = span
        self.token = token
        super().__init__(f"Invalid bracket syntax {span!r} in command argument {token!r}")


class LockError(TurnstileError):
    """I/O failure while opening, acquiring or releasing the host lock."""


class BackendError(TurnstileError):
    """
    Device enumeration, hold or usage-check failure.

    Usually points at a driver or hardware fault rather than contention,
    so it is surfaced immediately instead of retried.

    Attributes:
        resource_id: Device the failing call was about, if any.
    """

    def __init__(self, message: str, resource_id: Optional[int] = None):
        self.resource_id = resource_id
        if resource_id is not None:
            message = f"[device {resource_id}] {message}"
        super().__init__(message)


class ResourceRequestError(TurnstileError):
    """More devices requested than the host has in total."""


class ProcessSpawnError(TurnstileError):
    """The child command could not be launched."""
