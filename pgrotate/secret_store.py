"""Secret-store payloads and a refresher factory built on top of them."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .models import Credential, Slot
from .state import CredentialState

LOG = logging.getLogger(__name__)

RawSecret = str | bytes | Mapping[str, Any]
SecretFetcher = Callable[[], RawSecret | Awaitable[RawSecret]]


class SecretPayload(BaseModel):
    """Odd/even credential document as kept in the secret store.

    Expected shape::

        {
            "odd_username": "...",
            "odd_password": "...",
            "even_username": "...",
            "even_password": "...",
            "active_credential": "odd"
        }
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    odd_username: str
    odd_password: str = Field(repr=False)
    even_username: str
    even_password: str = Field(repr=False)
    active_credential: Slot

    @classmethod
    def from_raw(cls, raw: RawSecret) -> SecretPayload:
        if isinstance(raw, (str, bytes)):
            return cls.model_validate_json(raw)
        return cls.model_validate(dict(raw))

    @classmethod
    def from_json(cls, text: str | bytes) -> SecretPayload:
        return cls.model_validate_json(text)

    @property
    def odd(self) -> Credential:
        return Credential(self.odd_username, self.odd_password)

    @property
    def even(self) -> Credential:
        return Credential(self.even_username, self.even_password)

    def to_state(self) -> CredentialState:
        return CredentialState(self.odd, self.even, self.active_credential)

    def apply_to(self, state: CredentialState) -> None:
        """Install both pairs and the active slot in one critical section."""

        with state.locked():
            state.replace_all_locked(self.odd, self.even, self.active_credential)


def make_refresher(fetch: SecretFetcher) -> Callable[[CredentialState], Awaitable[None]]:
    """Build a refresher that fetches, validates and installs a secret payload."""

    async def _refresh(state: CredentialState) -> None:
        raw = fetch()
        if inspect.isawaitable(raw):
            raw = await raw
        payload = SecretPayload.from_raw(raw)
        payload.apply_to(state)
        LOG.info("Refreshed rotating credentials", extra={"active_slot": payload.active_credential.value})

    return _refresh


__all__ = ["RawSecret", "SecretFetcher", "SecretPayload", "make_refresher"]
