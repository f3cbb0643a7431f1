"""Osiris exception classes."""

from __future__ import annotations


class OsirisError(RuntimeError):
    """Base exception for Osiris errors."""


class UserError(OsirisError):
    """Errors that should be shown to user without traceback."""

    def __init__(self, message: str, rc: int = 2):
        super().__init__(message)
        self.rc = rc


class CommandFailureError(OsirisError):
    """Command failed - error message already printed, just need to exit."""

    def __init__(self, rc: int = 1):
        super().__init__("")
        self.rc = rc


class ConfigError(OsirisError):
    """Configuration is missing or unreadable."""


class TransportError(OsirisError):
    """Network failure or timeout talking to New Relic."""


class DecodeError(OsirisError):
    """New Relic returned a payload we could not decode."""


class NerdGraphError(OsirisError):
    """NerdGraph answered with a GraphQL ``errors`` list.

    Attributes:
        errors: The raw error objects from the response
    """

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []
