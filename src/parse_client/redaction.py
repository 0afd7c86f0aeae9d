"""Scrub configured secrets from rendered error text."""

from __future__ import annotations

import re
from collections.abc import Mapping
from urllib.parse import quote

MASTER_KEY_PLACEHOLDER = "-- REDACTED MASTER KEY --"
SESSION_TOKEN_PLACEHOLDER = "-- REDACTED SESSION TOKEN --"


class Redactor:
    """Replace literal occurrences of secret values with fixed placeholders.

    Secrets are matched longest first so a secret that contains another one is
    replaced as a whole. Each secret is also matched in its percent-encoded
    forms, since rendered URLs are escaped. Empty secrets are ignored.
    """

    def __init__(self, replacements: Mapping[str, str] | None = None) -> None:
        self._replacements: dict[str, str] = {}
        for secret, placeholder in (replacements or {}).items():
            if not secret:
                continue
            for form in (secret, quote(secret), quote(secret, safe="")):
                self._replacements.setdefault(form, placeholder)
        self._pattern: re.Pattern[str] | None = None
        if self._replacements:
            ordered = sorted(self._replacements, key=len, reverse=True)
            self._pattern = re.compile("|".join(re.escape(secret) for secret in ordered))

    @classmethod
    def noop(cls) -> Redactor:
        return cls()

    @property
    def enabled(self) -> bool:
        return self._pattern is not None

    def __call__(self, text: str) -> str:
        return self.redact(text)

    def redact(self, text: str) -> str:
        if self._pattern is None or not text:
            return text
        return self._pattern.sub(lambda match: self._replacements[match.group(0)], text)
