"""Wrapped-driver protocol, the asyncpg driver, and the named driver registry."""

from __future__ import annotations

import logging
import threading
from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

import asyncpg

from .errors import UnknownDriverError

LOG = logging.getLogger(__name__)

DEFAULT_DRIVER_NAME = "postgresrotating"

OpenFunc = Callable[[str], Awaitable[Any]]


@runtime_checkable
class Driver(Protocol):
    """Anything able to open a session from a fully-formed connection string."""

    async def connect(self, dsn: str) -> Any:
        """Open a connection using ``dsn`` (credentials embedded)."""


class AsyncpgDriver:
    """Driver that negotiates sessions through asyncpg."""

    def __init__(self, *, connect_timeout: float = 5.0, **connect_kwargs: Any) -> None:
        self._connect_timeout = connect_timeout
        self._connect_kwargs = connect_kwargs

    async def connect(self, dsn: str) -> asyncpg.Connection:
        kwargs: dict[str, Any] = dict(self._connect_kwargs)
        kwargs.setdefault("timeout", self._connect_timeout)
        return await asyncpg.connect(dsn, **kwargs)


class DriverRegistry:
    """Maps driver names to open functions, like ``sql.Register`` + ``sql.Open``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._drivers: dict[str, OpenFunc] = {}

    def register(self, name: str, opener: OpenFunc, *, replace: bool = False) -> None:
        """Register an open function under ``name``."""

        if not name:
            raise ValueError("Driver name must not be empty")
        with self._lock:
            if name in self._drivers and not replace:
                raise ValueError(f"Driver '{name}' is already registered")
            self._drivers[name] = opener
        LOG.debug("Registered driver", extra={"driver": name})

    def unregister(self, name: str) -> None:
        with self._lock:
            self._drivers.pop(name, None)

    def get(self, name: str) -> OpenFunc:
        with self._lock:
            try:
                return self._drivers[name]
            except KeyError:
                raise UnknownDriverError(name) from None

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._drivers)

    async def open(self, name: str, dsn: str) -> Any:
        """Open a connection through the driver registered as ``name``."""

        opener = self.get(name)
        return await opener(dsn)


default_registry = DriverRegistry()


def register_driver(name: str, opener: OpenFunc, *, replace: bool = False) -> None:
    default_registry.register(name, opener, replace=replace)


async def open_connection(name: str, dsn: str) -> Any:
    return await default_registry.open(name, dsn)


__all__ = [
    "AsyncpgDriver",
    "DEFAULT_DRIVER_NAME",
    "Driver",
    "DriverRegistry",
    "OpenFunc",
    "default_registry",
    "open_connection",
    "register_driver",
]
