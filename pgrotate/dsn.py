"""Connection-string template parsing and credential injection."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import SplitResult, quote, urlsplit, urlunsplit

from .errors import DsnParseError
from .models import ActiveCredential, Credential

REDACTED = "***"


@dataclass(frozen=True, slots=True)
class DsnTemplate:
    """Validated pieces of a credential-free connection string."""

    scheme: str
    netloc: str
    path: str
    query: str
    fragment: str = ""

    def render(self, username: str, password: str) -> str:
        userinfo = f"{quote(username, safe='')}:{quote(password, safe='')}"
        return urlunsplit(
            (self.scheme, f"{userinfo}@{self.netloc}", self.path, self.query, self.fragment)
        )


def parse_template(template: str) -> DsnTemplate:
    """Validate ``scheme://host[:port]/database?params`` without userinfo."""

    if not isinstance(template, str) or not template.strip():
        raise DsnParseError("Failed while parsing rotating DSN: template is empty")
    try:
        parts = urlsplit(template.strip())
        # Accessing .port validates the numeric range.
        parts.port
    except ValueError as exc:
        raise DsnParseError(f"Failed while parsing rotating DSN: {exc}") from exc
    if not parts.scheme:
        raise DsnParseError("Failed while parsing rotating DSN: missing scheme")
    if not parts.hostname:
        raise DsnParseError("Failed while parsing rotating DSN: missing host")
    if "@" in parts.netloc:
        raise DsnParseError("Rotating DSN template must not embed credentials")
    return DsnTemplate(
        scheme=parts.scheme,
        netloc=parts.netloc,
        path=parts.path,
        query=parts.query,
        fragment=parts.fragment,
    )


def build_dsn(template: str | DsnTemplate, credential: Credential | ActiveCredential) -> str:
    """Return the template with ``username:password@`` injected before the host."""

    parsed = template if isinstance(template, DsnTemplate) else parse_template(template)
    return parsed.render(credential.username, credential.password)


def redact_dsn(dsn: str) -> str:
    """Mask the password of a DSN so it can be logged."""

    try:
        parts = urlsplit(dsn)
        password = parts.password
    except ValueError:
        return REDACTED
    if password is None:
        return dsn
    userinfo, _, hostinfo = parts.netloc.rpartition("@")
    username = userinfo.split(":", 1)[0]
    redacted = SplitResult(
        parts.scheme,
        f"{username}:{REDACTED}@{hostinfo}",
        parts.path,
        parts.query,
        parts.fragment,
    )
    return urlunsplit(redacted)


__all__ = ["DsnTemplate", "REDACTED", "build_dsn", "parse_template", "redact_dsn"]
