"""Credential strategies that attach Parse identity headers to a request."""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from .errors import ParseError
from .redaction import MASTER_KEY_PLACEHOLDER, SESSION_TOKEN_PLACEHOLDER

APPLICATION_ID_HEADER = "X-Parse-Application-Id"
REST_API_KEY_HEADER = "X-Parse-REST-API-Key"
MASTER_KEY_HEADER = "X-Parse-Master-Key"
SESSION_TOKEN_HEADER = "X-Parse-Session-Token"


@runtime_checkable
class CredentialStrategy(Protocol):
    """Anything that can add identity headers to a request, or refuse to."""

    def apply(self, headers: MutableMapping[str, str]) -> None:
        """Add headers in place; raise a validation ``ParseError`` when incomplete."""

    def secrets(self) -> dict[str, str]:
        """Return secret values mapped to the placeholder used when redacting them."""


class _FrozenCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)


class RestAPIKey(_FrozenCredentials):
    """Authenticate with the application's REST API key."""

    rest_api_key: str = Field(default="", repr=False, description="Parse REST API key")

    def apply(self, headers: MutableMapping[str, str]) -> None:
        if not self.rest_api_key:
            raise ParseError.empty_field("rest_api_key")
        headers[REST_API_KEY_HEADER] = self.rest_api_key

    def secrets(self) -> dict[str, str]:
        return {}


class MasterKey(_FrozenCredentials):
    """Authenticate with the master key, bypassing ACLs and class permissions."""

    master_key: str = Field(default="", repr=False, description="Parse master key")

    def apply(self, headers: MutableMapping[str, str]) -> None:
        if not self.master_key:
            raise ParseError.empty_field("master_key")
        headers[MASTER_KEY_HEADER] = self.master_key

    def secrets(self) -> dict[str, str]:
        return {self.master_key: MASTER_KEY_PLACEHOLDER}


class SessionToken(_FrozenCredentials):
    """Act as a logged-in user: REST API key plus that user's session token."""

    rest_api_key: str = Field(default="", repr=False, description="Parse REST API key")
    session_token: str = Field(
        default="", repr=False, description="Session token of a logged-in user"
    )

    def apply(self, headers: MutableMapping[str, str]) -> None:
        if not self.rest_api_key:
            raise ParseError.empty_field("rest_api_key")
        if not self.session_token:
            raise ParseError.empty_field("session_token")
        headers[REST_API_KEY_HEADER] = self.rest_api_key
        headers[SESSION_TOKEN_HEADER] = self.session_token

    def secrets(self) -> dict[str, str]:
        return {self.session_token: SESSION_TOKEN_PLACEHOLDER}
