"""Lock-guarded credential slots shared by every connection attempt."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from .models import ActiveCredential, Credential, Slot


class CredentialState:
    """Holds the odd/even credential pairs and the slot to try first.

    All four fields sit behind a single lock. Readers get an
    :class:`ActiveCredential` copy so a username is never paired with the
    other slot's password. Refreshers that need a composite update should
    wrap it in :meth:`locked` and call :meth:`replace_all_locked`.
    """

    def __init__(
        self,
        odd: Credential,
        even: Credential,
        active_slot: Slot = Slot.ODD,
    ) -> None:
        self._lock = threading.Lock()
        self._odd = odd
        self._even = even
        self._active_slot = Slot(active_slot)
        self._refresh_in_flight = False
        self._owner: int | None = None

    @property
    def active_slot(self) -> Slot:
        with self._lock:
            return self._active_slot

    @property
    def refresh_in_flight(self) -> bool:
        with self._lock:
            return self._refresh_in_flight

    def snapshot_active(self) -> ActiveCredential:
        """Return a copy of the active pair together with its slot."""

        with self._lock:
            slot = self._active_slot
            credential = self._odd if slot is Slot.ODD else self._even
            return ActiveCredential(
                username=credential.username,
                password=credential.password,
                slot=slot,
            )

    def flip_active(self) -> None:
        """Advance the slot the next attempt will try first."""

        with self._lock:
            self._active_slot = self._active_slot.other

    def replace_all(self, odd: Credential, even: Credential, active_slot: Slot) -> None:
        """Overwrite both pairs and the active slot in one critical section."""

        with self._lock:
            self._write(odd, even, active_slot)

    def replace_all_locked(self, odd: Credential, even: Credential, active_slot: Slot) -> None:
        """Same as :meth:`replace_all` for callers already holding the lock."""

        if self._owner != threading.get_ident():
            raise RuntimeError("replace_all_locked() requires the state lock to be held by the caller")
        self._write(odd, even, active_slot)

    def acquire(self) -> None:
        self._lock.acquire()
        self._owner = threading.get_ident()

    def release(self) -> None:
        if self._owner != threading.get_ident():
            raise RuntimeError("release() called by a thread that does not hold the state lock")
        self._owner = None
        self._lock.release()

    @contextmanager
    def locked(self) -> Iterator[CredentialState]:
        """Hold the state lock for a multi-statement update."""

        self.acquire()
        try:
            yield self
        finally:
            self.release()

    def _write(self, odd: Credential, even: Credential, active_slot: Slot) -> None:
        self._odd = odd
        self._even = even
        self._active_slot = Slot(active_slot)

    def try_begin_refresh(self) -> bool:
        """Mark a refresh as running; False if one is already in flight."""

        with self._lock:
            if self._refresh_in_flight:
                return False
            self._refresh_in_flight = True
            return True

    def end_refresh(self) -> None:
        with self._lock:
            self._refresh_in_flight = False


__all__ = ["CredentialState"]
