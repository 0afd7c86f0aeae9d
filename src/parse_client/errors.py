"""Error taxonomy for Parse API calls."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Discriminates how a Parse API call failed."""

    VALIDATION = "validation"
    SERIALIZATION = "serialization"
    TRANSPORT = "transport"
    API = "api"
    RAW = "raw"
    DECODE = "decode"


@dataclass(eq=False, slots=True)
class ParseError(Exception):
    """A failed Parse API call.

    Callers branch on ``kind`` instead of on exception subclasses. ``url``,
    ``detail`` and ``body`` are stored already redacted, so rendering the
    error never exposes a configured secret. ``cause`` names the type of
    the lower-level exception, which is only chained as ``__cause__`` when
    redaction is off.
    """

    kind: ErrorKind
    detail: str = ""
    method: str | None = None
    url: str | None = None
    status_code: int | None = None
    reason: str | None = None
    code: int | None = None
    message: str | None = None
    body: str | None = None
    field: str | None = None
    cause: str | None = None

    @classmethod
    def empty_field(cls, field: str) -> ParseError:
        """Return the validation error for a required value that is empty."""
        return cls(ErrorKind.VALIDATION, detail=f"empty {field}", field=field)

    def __str__(self) -> str:
        prefix = ""
        if self.method or self.url:
            prefix = " ".join(part for part in (self.method, self.url) if part) + " "
            if self.status_code is not None:
                status = str(self.status_code)
                if self.reason:
                    status = f"{status} {self.reason}"
                prefix += f"got {status} "
            prefix += "failed with "
        return f"{prefix}{self.detail}"


def api_error_detail(code: int | None, message: str | None) -> str:
    """Render the ``code X and message Y`` part of a structured API error."""
    parts: list[str] = []
    if code:
        parts.append(f"code {code}")
    if message:
        parts.append(f"message {message}")
    return " and ".join(parts)
