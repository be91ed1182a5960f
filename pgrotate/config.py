"""Connector settings loading helpers."""

from __future__ import annotations

from pathlib import Path

import tomllib

from pydantic import BaseModel, Field, ValidationError

from .classify import FailureClassifier
from .connector import Refresher, RotatingConnector
from .drivers import DEFAULT_DRIVER_NAME, AsyncpgDriver, Driver, DriverRegistry
from .state import CredentialState

CONFIG_FILE = Path.home() / ".config" / "pgrotate" / "config.toml"
CONFIG_TABLE = "pgrotate"


class RotationSettings(BaseModel):
    """Tunables for wiring a :class:`RotatingConnector`."""

    driver_name: str = DEFAULT_DRIVER_NAME
    connect_timeout: float = Field(default=5.0, gt=0)
    single_flight: bool = True
    auth_failure_codes: list[str] = Field(default_factory=list)
    dsn_template: str | None = None

    def classifier(self) -> FailureClassifier:
        """Default SQLSTATE table extended with the configured codes."""

        return FailureClassifier().with_codes(self.auth_failure_codes)

    def build_connector(
        self,
        state: CredentialState,
        *,
        refresher: Refresher | None = None,
        driver: Driver | None = None,
    ) -> RotatingConnector:
        return RotatingConnector(
            state,
            driver=driver or AsyncpgDriver(connect_timeout=self.connect_timeout),
            refresher=refresher,
            classifier=self.classifier(),
            single_flight=self.single_flight,
            dsn_template=self.dsn_template,
        )

    def build_and_register(
        self,
        state: CredentialState,
        *,
        refresher: Refresher | None = None,
        driver: Driver | None = None,
        registry: DriverRegistry | None = None,
    ) -> RotatingConnector:
        """Build a connector and register its open function under ``driver_name``."""

        connector = self.build_connector(state, refresher=refresher, driver=driver)
        connector.register(self.driver_name, registry)
        return connector


def load_settings(path: Path | None = None) -> RotationSettings:
    """Load settings from disk; fall back to defaults if missing or invalid."""

    try:
        data = _read_config_file(path or CONFIG_FILE)
    except FileNotFoundError:
        return RotationSettings()
    except (tomllib.TOMLDecodeError, OSError):
        return RotationSettings()
    try:
        return RotationSettings(**data)
    except ValidationError:
        return RotationSettings()


def _read_config_file(path: Path) -> dict[str, object]:
    with path.open("rb") as handle:
        raw = tomllib.load(handle)
    table = raw.get(CONFIG_TABLE)
    data: dict[str, object] = {}
    if not isinstance(table, dict):
        return data
    for key in ("driver_name", "dsn_template"):
        value = table.get(key)
        if isinstance(value, str):
            data[key] = value
    timeout = table.get("connect_timeout")
    if isinstance(timeout, (int, float)) and not isinstance(timeout, bool):
        data["connect_timeout"] = float(timeout)
    single_flight = table.get("single_flight")
    if isinstance(single_flight, bool):
        data["single_flight"] = single_flight
    codes = table.get("auth_failure_codes")
    if isinstance(codes, list):
        data["auth_failure_codes"] = [str(code) for code in codes]
    return data


__all__ = ["CONFIG_FILE", "RotationSettings", "load_settings"]
