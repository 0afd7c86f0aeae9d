"""Tests for credential strategies."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from parse_client.credentials import (
    CredentialStrategy,
    MasterKey,
    RestAPIKey,
    SessionToken,
)
from parse_client.errors import ErrorKind, ParseError
from parse_client.redaction import MASTER_KEY_PLACEHOLDER, SESSION_TOKEN_PLACEHOLDER


def test_empty_master_key() -> None:
    with pytest.raises(ParseError, match="empty master_key") as exc_info:
        MasterKey().apply({})

    assert exc_info.value.kind is ErrorKind.VALIDATION


def test_empty_rest_api_key() -> None:
    with pytest.raises(ParseError, match="empty rest_api_key"):
        RestAPIKey().apply({})


def test_session_token_checks_rest_api_key_first() -> None:
    with pytest.raises(ParseError, match="empty rest_api_key"):
        SessionToken().apply({})


def test_empty_session_token() -> None:
    headers: dict[str, str] = {}
    with pytest.raises(ParseError, match="empty session_token"):
        SessionToken(rest_api_key="rk").apply(headers)

    assert headers == {}


def test_apply_adds_headers() -> None:
    headers: dict[str, str] = {"User-Agent": "ua"}
    SessionToken(rest_api_key="rk", session_token="st").apply(headers)

    assert headers == {
        "User-Agent": "ua",
        "X-Parse-REST-API-Key": "rk",
        "X-Parse-Session-Token": "st",
    }


def test_secrets_offered_for_redaction() -> None:
    assert RestAPIKey(rest_api_key="rk").secrets() == {}
    assert MasterKey(master_key="mk").secrets() == {"mk": MASTER_KEY_PLACEHOLDER}
    assert SessionToken(rest_api_key="rk", session_token="st").secrets() == {
        "st": SESSION_TOKEN_PLACEHOLDER
    }


def test_credentials_are_immutable_and_hide_secrets_in_repr() -> None:
    credentials = MasterKey(master_key="super-secret")

    with pytest.raises(ValidationError):
        credentials.master_key = "other"  # type: ignore[misc]
    assert "super-secret" not in repr(credentials)


def test_strategies_satisfy_protocol() -> None:
    class HeaderOnly:
        def apply(self, headers: dict[str, str]) -> None:
            headers["X-Custom"] = "1"

        def secrets(self) -> dict[str, str]:
            return {}

    for strategy in (RestAPIKey(), MasterKey(), SessionToken(), HeaderOnly()):
        assert isinstance(strategy, CredentialStrategy)
