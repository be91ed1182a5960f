"""Rotating connector: alternate credential slots and fail over once on auth errors."""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from typing import Any, Awaitable, Callable

from .classify import FailureClassifier, FailureKind
from .drivers import DEFAULT_DRIVER_NAME, AsyncpgDriver, Driver, DriverRegistry, default_registry
from .dsn import DsnTemplate, build_dsn, parse_template, redact_dsn
from .errors import BothCredentialsInvalid, DsnParseError
from .models import ActiveCredential, AttemptOutcome, ConnectionAttempt
from .state import CredentialState

LOG = logging.getLogger(__name__)

Refresher = Callable[[CredentialState], Awaitable[None] | None]
AttemptListener = Callable[[ConnectionAttempt], None]


class RotatingConnector:
    """Opens connections with whichever credential slot is expected to work.

    Every :meth:`open` call snapshots the active slot, flips it for the next
    caller, and connects with the snapshot. An authentication failure triggers
    exactly one retry with a fresh snapshot plus a detached refresh of both
    slots; any other failure is re-raised untouched.
    """

    def __init__(
        self,
        state: CredentialState,
        *,
        driver: Driver | None = None,
        refresher: Refresher | None = None,
        classifier: FailureClassifier | None = None,
        single_flight: bool = True,
        dsn_template: str | None = None,
    ) -> None:
        self._state = state
        self._dsn_template = dsn_template
        self._driver = driver or AsyncpgDriver()
        self._refresher = refresher
        self._classifier = classifier or FailureClassifier()
        self._single_flight = single_flight
        self._listeners: set[AttemptListener] = set()

    @property
    def state(self) -> CredentialState:
        return self._state

    @property
    def classifier(self) -> FailureClassifier:
        return self._classifier

    async def open(self, dsn_template: str | None = None) -> Any:
        """Connect using the template with the active credentials injected.

        Falls back to the template given at construction when none is passed.
        """

        if dsn_template is None:
            dsn_template = self._dsn_template
        if dsn_template is None:
            raise DsnParseError("No DSN template given and no default configured")
        template = parse_template(dsn_template)
        primary = self._state.snapshot_active()
        self._state.flip_active()
        try:
            connection = await self._connect(template, primary)
        except Exception as exc:
            kind = self._classifier.classify(exc)
            self._emit(dsn_template, primary, _outcome_for(kind), error=exc)
            if kind is not FailureKind.AUTH_FAILURE:
                raise
            primary_error = exc
        else:
            self._emit(dsn_template, primary, AttemptOutcome.SUCCESS)
            return connection

        secondary = self._state.snapshot_active()
        LOG.info(
            "Credential slot rejected; falling back",
            extra={"slot": primary.slot.value, "fallback_slot": secondary.slot.value},
        )
        try:
            connection = await self._connect(template, secondary)
        except Exception as exc:
            kind = self._classifier.classify(exc)
            self._emit(dsn_template, secondary, _outcome_for(kind), fallback=True, error=exc)
            LOG.warning(
                "Both credential slots rejected",
                extra={"slot": primary.slot.value, "fallback_slot": secondary.slot.value},
            )
            self._schedule_refresh()
            raise BothCredentialsInvalid(primary_error=primary_error, fallback_error=exc) from exc
        self._emit(dsn_template, secondary, AttemptOutcome.SUCCESS, fallback=True)
        self._schedule_refresh()
        return connection

    def refresh_now(self) -> bool:
        """Start a detached refresh; False if skipped."""

        return self._schedule_refresh()

    def register(self, name: str = DEFAULT_DRIVER_NAME, registry: DriverRegistry | None = None) -> None:
        """Expose :meth:`open` under ``name`` in a driver registry."""

        (registry or default_registry).register(name, self.open)

    def subscribe(self, listener: AttemptListener) -> Callable[[], None]:
        """Subscribe to attempt records; returns an unsubscribe handle."""

        self._listeners.add(listener)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    async def _connect(self, template: DsnTemplate, credential: ActiveCredential) -> Any:
        dsn = build_dsn(template, credential)
        LOG.debug("Connecting", extra={"slot": credential.slot.value, "dsn": redact_dsn(dsn)})
        return await self._driver.connect(dsn)

    def _emit(
        self,
        dsn_template: str,
        credential: ActiveCredential,
        outcome: AttemptOutcome,
        *,
        fallback: bool = False,
        error: BaseException | None = None,
    ) -> None:
        attempt = ConnectionAttempt(
            dsn_template=dsn_template,
            tried_slot=credential.slot,
            outcome=outcome,
            fallback=fallback,
            error=error,
        )
        for listener in tuple(self._listeners):
            try:
                listener(attempt)
            except Exception:
                LOG.exception(
                    "Attempt listener failed",
                    extra={"slot": attempt.tried_slot.value, "outcome": attempt.outcome.value},
                )

    def _schedule_refresh(self) -> bool:
        if self._refresher is None:
            LOG.debug("No credential refresher configured")
            return False
        if self._single_flight and not self._state.try_begin_refresh():
            LOG.debug("Credential refresh already in flight")
            return False
        thread = threading.Thread(
            target=self._run_refresh,
            name="pgrotate-refresh",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError:
            if self._single_flight:
                self._state.end_refresh()
            LOG.exception("Could not start credential refresh")
            return False
        LOG.info("Started credential refresh")
        return True

    def _run_refresh(self) -> None:
        assert self._refresher is not None
        try:
            result = self._refresher(self._state)
            if inspect.isawaitable(result):
                asyncio.run(_await(result))
        except Exception:
            LOG.exception("Credential refresh failed")
        finally:
            if self._single_flight:
                self._state.end_refresh()


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


def _outcome_for(kind: FailureKind) -> AttemptOutcome:
    if kind is FailureKind.AUTH_FAILURE:
        return AttemptOutcome.AUTH_FAILURE
    return AttemptOutcome.OTHER_FAILURE


__all__ = ["AttemptListener", "Refresher", "RotatingConnector"]
