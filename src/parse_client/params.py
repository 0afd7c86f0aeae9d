"""Builders for Parse query options such as ``limit``, ``skip`` and ``where``.

Zero values follow the API's own defaults: ``limit(0)`` is sent because a
zero limit is meaningful (count-only queries), while ``skip(0)``,
``count(False)`` and empty ``order``/``include``/``keys`` are omitted.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from .errors import ErrorKind, ParseError

QueryParams = dict[str, str]
Param = Callable[[QueryParams], None]


def include(fields: Sequence[str]) -> Param:
    """Relations or pointers to include in the results."""

    def _set(values: QueryParams) -> None:
        if fields:
            values["include"] = ",".join(fields)

    return _set


def order(spec: str) -> Param:
    """Sort order, e.g. ``"-createdAt"``."""

    def _set(values: QueryParams) -> None:
        if spec:
            values["order"] = spec

    return _set


def limit(value: int) -> Param:
    """Maximum number of results. Zero is sent."""
    if value < 0:
        raise ValueError("limit must be non-negative")

    def _set(values: QueryParams) -> None:
        values["limit"] = str(value)

    return _set


def count(enabled: bool) -> Param:
    """Ask for the total count alongside the results."""

    def _set(values: QueryParams) -> None:
        if enabled:
            values["count"] = "1"

    return _set


def skip(offset: int) -> Param:
    """Number of results to skip. Zero is not sent."""
    if offset < 0:
        raise ValueError("skip must be non-negative")

    def _set(values: QueryParams) -> None:
        if offset:
            values["skip"] = str(offset)

    return _set


def keys(fields: Sequence[str]) -> Param:
    """Restrict the returned fields."""

    def _set(values: QueryParams) -> None:
        if fields:
            values["keys"] = ",".join(fields)

    return _set


def where(constraints: Any) -> Param:
    """JSON-encoded query constraints."""

    def _set(values: QueryParams) -> None:
        try:
            encoded = json.dumps(constraints, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise ParseError(
                ErrorKind.SERIALIZATION, detail=f"where constraint is not JSON encodable: {exc}"
            ) from exc
        values["where"] = encoded

    return _set


def param_values(*params: Param | Iterable[Param]) -> QueryParams:
    """Apply the builders in order and return the resulting query mapping."""
    values: QueryParams = {}
    for param in params:
        if callable(param):
            param(values)
        else:
            for nested in param:
                nested(values)
    return values
