"""Settings loading for Parse API access."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from loguru import logger
from omegaconf import OmegaConf
from pydantic import BaseModel, Field

from .client import DEFAULT_BASE_URL
from .credentials import CredentialStrategy, MasterKey, RestAPIKey, SessionToken

CONFIG_PATH_ENV = "PARSE_CONFIG_PATH"
DEFAULT_CONFIG_PATH = "conf/parse.yml"


def _locate_config(path: Path | str, *, source: str) -> Path:
    """Find the settings file, trying relative paths from the working directory
    and from the project checkout."""
    wanted = Path(path).expanduser()
    if wanted.is_absolute():
        tried = [wanted]
    else:
        tried = [Path.cwd() / wanted, Path(__file__).resolve().parents[2] / wanted]
    found = list(dict.fromkeys(option.resolve() for option in tried if option.is_file()))
    if not found:
        places = "\n".join(str(option) for option in tried)
        raise FileNotFoundError(
            f"Parse config not found for {source}: {wanted}\nTried:\n{places}"
        )
    if len(found) > 1:
        raise RuntimeError(
            f"Ambiguous Parse config for {source}: {wanted} matches "
            + ", ".join(str(option) for option in found)
        )
    return found[0]


def _load_normalized(location: Path) -> dict[str, Any]:
    raw_config = OmegaConf.load(location)
    config = OmegaConf.to_container(raw_config, resolve=True)
    if not isinstance(config, dict):
        raise ValueError("Parse config file must contain a mapping of settings.")
    normalized: dict[str, Any] = {}
    for key, value in config.items():
        name = str(key).lower()
        if name.startswith("parse_"):
            name = name[len("parse_") :]
        normalized[name] = value
    return normalized


class ParseSettings(BaseModel):
    """Resolved Parse application settings.

    Values come from a YAML file (``conf/parse.yml`` by default, or the path in
    ``PARSE_CONFIG_PATH``). Keys may be written either as ``application_id`` or
    ``PARSE_APPLICATION_ID``.
    """

    application_id: str = Field(description="Parse application id")
    rest_api_key: str | None = Field(default=None, repr=False, description="REST API key")
    master_key: str | None = Field(default=None, repr=False, description="Master key")
    session_token: str | None = Field(
        default=None, repr=False, description="Session token of a logged-in user"
    )
    base_url: str = Field(default=DEFAULT_BASE_URL, description="Base URL for relative paths")
    redact: bool = Field(default=True, description="Redact secrets from error messages")

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> ParseSettings:
        """Load settings, preferring ``PARSE_CONFIG_PATH`` over ``path`` over the default."""
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            location = _locate_config(env_path, source=CONFIG_PATH_ENV)
        elif path is not None:
            location = _locate_config(path, source="path")
        else:
            location = _locate_config(DEFAULT_CONFIG_PATH, source="default")

        normalized = _load_normalized(location)
        if not normalized.get("application_id"):
            raise ValueError(f"Missing Parse setting application_id in {location}")
        known = {key: value for key, value in normalized.items() if key in cls.model_fields}
        ignored = sorted(set(normalized) - set(known))
        if ignored:
            logger.warning(f"Ignoring unknown Parse settings in {location}: {', '.join(ignored)}")
        return cls.model_validate(known)

    def credentials(self) -> CredentialStrategy:
        """Pick the strongest configured strategy: master key, session token, REST key."""
        if self.master_key:
            return MasterKey(master_key=self.master_key)
        if self.session_token:
            return SessionToken(
                rest_api_key=self.rest_api_key or "", session_token=self.session_token
            )
        return RestAPIKey(rest_api_key=self.rest_api_key or "")
