"""Exception taxonomy raised by the rotating connector."""

from __future__ import annotations


class RotatingConnectorError(RuntimeError):
    """Base class for errors raised by pgrotate itself."""


class DsnParseError(RotatingConnectorError, ValueError):
    """Raised when a connection-string template is malformed."""


class BothCredentialsInvalid(RotatingConnectorError):
    """Raised when both credential slots are rejected within one open call."""

    def __init__(
        self,
        message: str = "Both credential slots were rejected",
        *,
        primary_error: BaseException | None = None,
        fallback_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.primary_error = primary_error
        self.fallback_error = fallback_error


class UnknownDriverError(KeyError):
    """Raised when opening a driver name nobody registered."""

    def __str__(self) -> str:
        return f"No driver registered under '{self.args[0]}'"


__all__ = [
    "BothCredentialsInvalid",
    "DsnParseError",
    "RotatingConnectorError",
    "UnknownDriverError",
]
