"""Pytest configuration for test discovery, env, and fixtures.

This file ensures that:
- `src/` is importable
- Integration tests can read credentials from `conf/parse.yml`
- Unit tests get an in-memory Parse server behind `httpx.MockTransport`
"""

from __future__ import annotations

import itertools
import json
import os
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import httpx
import pytest

# Ensure src directory is in path for imports
repo_root = Path(__file__).parent.parent
src_path = repo_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


def _load_settings_into_env() -> None:
    """Load conf/parse.yml into environment variables that are not already set.

    This supports running the live integration test locally without manually
    exporting credentials.
    """
    settings_path = repo_root / "conf" / "parse.yml"
    if not settings_path.exists():
        return

    from omegaconf import OmegaConf

    data = OmegaConf.to_container(OmegaConf.load(settings_path), resolve=True)
    if not isinstance(data, dict):
        return

    for key, value in data.items():
        env_key = str(key).upper()
        if not env_key.startswith("PARSE_"):
            env_key = f"PARSE_{env_key}"
        if os.environ.get(env_key) or not value:
            continue
        os.environ[env_key] = str(value)


def pytest_sessionstart(session: object) -> None:
    _load_settings_into_env()


class FakeParseServer:
    """Just enough of the Parse object API to exercise round trips."""

    def __init__(self, application_id: str, rest_api_key: str) -> None:
        self.application_id = application_id
        self.rest_api_key = rest_api_key
        self.objects: dict[str, dict[str, dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []
        self._ids = itertools.count(1)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if (
            request.headers.get("X-Parse-Application-Id") != self.application_id
            or request.headers.get("X-Parse-REST-API-Key") != self.rest_api_key
        ):
            return httpx.Response(401, json={"error": "unauthorized"})

        parts = [part for part in request.url.path.split("/") if part]
        if len(parts) < 3 or parts[:2] != ["1", "classes"]:
            return httpx.Response(404, text="<html>not found</html>")
        class_name = parts[2]
        object_id = parts[3] if len(parts) > 3 else None
        table = self.objects.setdefault(class_name, {})

        if request.method == "POST" and object_id is None:
            new_id = f"obj{next(self._ids)}"
            created_at = datetime(2024, 1, 1, tzinfo=UTC).isoformat().replace("+00:00", "Z")
            table[new_id] = {
                **json.loads(request.content),
                "objectId": new_id,
                "createdAt": created_at,
            }
            return httpx.Response(201, json={"objectId": new_id, "createdAt": created_at})

        if object_id is None:
            return httpx.Response(200, json={"results": list(table.values())})
        if object_id not in table:
            return httpx.Response(404, json={"code": 101, "error": "object not found for get"})
        if request.method == "GET":
            return httpx.Response(200, json=table[object_id])
        if request.method == "PUT":
            table[object_id].update(json.loads(request.content))
            return httpx.Response(200, json={"updatedAt": table[object_id]["createdAt"]})
        if request.method == "DELETE":
            del table[object_id]
            return httpx.Response(200, json={})
        return httpx.Response(405, text="method not allowed")


@pytest.fixture
def fake_parse_server() -> FakeParseServer:
    return FakeParseServer(application_id="app-id", rest_api_key="rest-key")
