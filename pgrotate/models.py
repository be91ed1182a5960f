"""Shared dataclasses used across state/connector modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Slot(str, Enum):
    """Credential slots used in alternation."""

    ODD = "odd"
    EVEN = "even"

    @property
    def other(self) -> Slot:
        return Slot.EVEN if self is Slot.ODD else Slot.ODD


class AttemptOutcome(str, Enum):
    """Result of a single driver connect call."""

    SUCCESS = "success"
    AUTH_FAILURE = "auth_failure"
    OTHER_FAILURE = "other_failure"


@dataclass(frozen=True, slots=True)
class Credential:
    """Username/password pair stored in one slot."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class ActiveCredential:
    """Consistent copy of the active slot taken under the state lock."""

    username: str
    password: str = field(repr=False)
    slot: Slot


@dataclass(frozen=True, slots=True)
class ConnectionAttempt:
    """Transient record of one connect attempt (never carries secrets)."""

    dsn_template: str
    tried_slot: Slot
    outcome: AttemptOutcome
    fallback: bool = False
    error: BaseException | None = None


__all__ = [
    "ActiveCredential",
    "AttemptOutcome",
    "ConnectionAttempt",
    "Credential",
    "Slot",
]
