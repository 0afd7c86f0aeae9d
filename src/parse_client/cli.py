"""Command line access to the Parse REST API.

Usage:
    parse-client get classes/GameScore --where '{"score": {"$gt": 1000}}' --limit 10
    parse-client post classes/GameScore '{"score": 1337, "playerName": "Sean Plott"}'
    parse-client delete classes/GameScore/Ed1nuqPvcm

Settings are read with ParseSettings.from_file() (conf/parse.yml by default).
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click
import httpx
from loguru import logger

from . import params as query
from .client import ParseClient
from .errors import ParseError
from .settings import ParseSettings


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    level = "DEBUG" if verbose else "WARNING"
    logger.add(sys.stderr, level=level, format="<level>{message}</level>")


def _parse_json(value: str, label: str) -> Any:
    try:
        return json.loads(value)
    except ValueError as exc:
        raise click.BadParameter(f"{label} is not valid JSON: {exc}") from exc


async def _call(
    settings: ParseSettings,
    method: str,
    path: str,
    *,
    body: Any = None,
    params: list[query.Param] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    async with httpx.AsyncClient(transport=transport) as http_client:
        client = ParseClient(
            http_client,
            settings.application_id,
            settings.credentials(),
            base_url=settings.base_url,
            redact=settings.redact,
        )
        return await client.request(method, path, body=body, params=params, result_type=Any)


def _run(ctx: click.Context, method: str, path: str, **kwargs: Any) -> None:
    settings: ParseSettings = ctx.obj["settings"]
    transport = ctx.obj.get("transport")
    try:
        result = asyncio.run(_call(settings, method, path, transport=transport, **kwargs))
    except ParseError as exc:
        logger.debug(f"Parse call failed ({exc.kind.value})")
        click.echo(str(exc), err=True)
        ctx.exit(1)
    click.echo(json.dumps(result, indent=2, sort_keys=True))


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None)
@click.option("-v", "--verbose", is_flag=True, help="Log requests and responses.")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Call the Parse REST API with credentials from the settings file."""
    _configure_logging(verbose)
    try:
        settings = ParseSettings.from_file(config_path)
    except (FileNotFoundError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    ctx.ensure_object(dict)["settings"] = settings


@main.command()
@click.argument("path")
@click.option("--where", "where_json", default=None, help="JSON query constraints.")
@click.option("--limit", type=click.IntRange(min=0), default=None)
@click.option("--skip", type=click.IntRange(min=0), default=0)
@click.option("--order", default="")
@click.option("--keys", default="", help="Comma separated fields to return.")
@click.option("--include", default="", help="Comma separated pointers to include.")
@click.option("--count", is_flag=True, help="Also return the total count.")
@click.pass_context
def get(
    ctx: click.Context,
    path: str,
    where_json: str | None,
    limit: int | None,
    skip: int,
    order: str,
    keys: str,
    include: str,
    count: bool,
) -> None:
    """GET PATH relative to the base URL."""
    params = [
        query.skip(skip),
        query.order(order),
        query.keys([key for key in keys.split(",") if key]),
        query.include([field for field in include.split(",") if field]),
        query.count(count),
    ]
    if limit is not None:
        params.append(query.limit(limit))
    if where_json is not None:
        params.append(query.where(_parse_json(where_json, "--where")))
    _run(ctx, "GET", path, params=params)


@main.command()
@click.argument("path")
@click.argument("data")
@click.pass_context
def post(ctx: click.Context, path: str, data: str) -> None:
    """POST DATA (JSON) to PATH."""
    _run(ctx, "POST", path, body=_parse_json(data, "DATA"))


@main.command()
@click.argument("path")
@click.argument("data")
@click.pass_context
def put(ctx: click.Context, path: str, data: str) -> None:
    """PUT DATA (JSON) to PATH."""
    _run(ctx, "PUT", path, body=_parse_json(data, "DATA"))


@main.command()
@click.argument("path")
@click.pass_context
def delete(ctx: click.Context, path: str) -> None:
    """DELETE PATH."""
    _run(ctx, "DELETE", path)
