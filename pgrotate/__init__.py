"""Rotating odd/even PostgreSQL credentials behind a single connect call."""

from __future__ import annotations

__version__ = "0.1.0"

from .classify import POSTGRES_AUTH_FAILURE_CODES, FailureClassifier, FailureKind
from .config import RotationSettings, load_settings
from .connector import RotatingConnector
from .drivers import (
    DEFAULT_DRIVER_NAME,
    AsyncpgDriver,
    Driver,
    DriverRegistry,
    default_registry,
    open_connection,
    register_driver,
)
from .dsn import build_dsn, parse_template, redact_dsn
from .errors import BothCredentialsInvalid, DsnParseError, RotatingConnectorError, UnknownDriverError
from .models import ActiveCredential, AttemptOutcome, ConnectionAttempt, Credential, Slot
from .secret_store import SecretPayload, make_refresher
from .state import CredentialState

__all__ = [
    "ActiveCredential",
    "AsyncpgDriver",
    "AttemptOutcome",
    "BothCredentialsInvalid",
    "ConnectionAttempt",
    "Credential",
    "CredentialState",
    "DEFAULT_DRIVER_NAME",
    "Driver",
    "DriverRegistry",
    "DsnParseError",
    "FailureClassifier",
    "FailureKind",
    "POSTGRES_AUTH_FAILURE_CODES",
    "RotatingConnector",
    "RotatingConnectorError",
    "RotationSettings",
    "SecretPayload",
    "Slot",
    "UnknownDriverError",
    "build_dsn",
    "default_registry",
    "load_settings",
    "make_refresher",
    "open_connection",
    "parse_template",
    "redact_dsn",
    "register_driver",
]
