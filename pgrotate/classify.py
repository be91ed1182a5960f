"""Classification of driver failures into authentication vs. everything else."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Mapping


class FailureKind(str, Enum):
    """How the connector reacts to a failed connect call."""

    AUTH_FAILURE = "auth_failure"
    OTHER_FAILURE = "other_failure"


# SQLSTATE class 28: invalid authorization specification.
POSTGRES_AUTH_FAILURE_CODES: Mapping[str, str] = {
    "28000": "invalid_authorization_specification",
    "28P01": "invalid_password",
}

_CODE_ATTRIBUTES = ("sqlstate", "pgcode")


def error_code(exc: BaseException) -> str | None:
    """Return the SQLSTATE carried by a driver exception, if any."""

    for attribute in _CODE_ATTRIBUTES:
        code = getattr(exc, attribute, None)
        if isinstance(code, str) and code:
            return code
    return None


class FailureClassifier:
    """Lookup table from driver error code to :class:`FailureKind`."""

    def __init__(self, codes: Mapping[str, FailureKind] | None = None) -> None:
        if codes is None:
            codes = {code: FailureKind.AUTH_FAILURE for code in POSTGRES_AUTH_FAILURE_CODES}
        self._codes: dict[str, FailureKind] = {
            code.upper(): FailureKind(kind) for code, kind in codes.items()
        }

    @property
    def codes(self) -> Mapping[str, FailureKind]:
        return dict(self._codes)

    def register(self, code: str, kind: FailureKind = FailureKind.AUTH_FAILURE) -> None:
        """Add or override a single code."""

        self._codes[code.upper()] = FailureKind(kind)

    def with_codes(self, codes: Iterable[str], kind: FailureKind = FailureKind.AUTH_FAILURE) -> FailureClassifier:
        """Return a copy that also maps ``codes`` to ``kind``."""

        merged = dict(self._codes)
        merged.update({code.upper(): FailureKind(kind) for code in codes})
        return FailureClassifier(merged)

    def classify(self, exc: BaseException) -> FailureKind:
        code = error_code(exc)
        if code is None:
            return FailureKind.OTHER_FAILURE
        return self._codes.get(code.upper(), FailureKind.OTHER_FAILURE)

    def is_auth_failure(self, exc: BaseException) -> bool:
        return self.classify(exc) is FailureKind.AUTH_FAILURE


__all__ = [
    "FailureClassifier",
    "FailureKind",
    "POSTGRES_AUTH_FAILURE_CODES",
    "error_code",
]
