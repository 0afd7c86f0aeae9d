"""Async client for the Parse REST API."""

from __future__ import annotations

import json
from collections.abc import Mapping
from importlib import metadata
from typing import Any

import httpx
from loguru import logger
from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from .credentials import APPLICATION_ID_HEADER, CredentialStrategy
from .errors import ErrorKind, ParseError, api_error_detail
from .params import Param, param_values
from .redaction import Redactor

DEFAULT_BASE_URL = "https://api.parse.com/1/"

QueryInput = Mapping[str, Any] | list[Param] | tuple[Param, ...] | None


def _resolve_version() -> str:
    """Return the installed distribution version or fall back to the project default."""

    try:
        return metadata.version("parse-client")
    except metadata.PackageNotFoundError:
        return "0.1.0"


__version__ = _resolve_version()
USER_AGENT = f"parse-client/{__version__}"


class StructuredError(BaseModel):
    """Error body returned by the Parse API for failed calls."""

    code: int = 0
    message: str = Field(default="", validation_alias=AliasChoices("error", "message"))


class ParseClient:
    """Perform authenticated Parse API calls over an injected ``httpx.AsyncClient``.

    The HTTP client (and its transport) owns connection pooling, TLS and
    timeouts. This class only resolves URLs, adds identity headers, frames JSON
    bodies and classifies responses, so a single instance may be shared by
    concurrent callers.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        application_id: str,
        credentials: CredentialStrategy,
        *,
        base_url: httpx.URL | str = DEFAULT_BASE_URL,
        redact: bool = False,
    ) -> None:
        self._http = http_client
        self._application_id = application_id
        self._credentials = credentials
        self._base_url = httpx.URL(base_url)
        self._redact = redact
        self._redactor = self._build_redactor()

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    @property
    def credentials(self) -> CredentialStrategy:
        return self._credentials

    def with_credentials(self, credentials: CredentialStrategy) -> ParseClient:
        """Return a client identical to this one but authenticating with ``credentials``."""
        return ParseClient(
            self._http,
            self._application_id,
            credentials,
            base_url=self._base_url,
            redact=self._redact,
        )

    def _build_redactor(self) -> Redactor:
        if not self._redact:
            return Redactor.noop()
        return Redactor(self._credentials.secrets())

    def resolve_url(self, url: httpx.URL | str | None = None) -> httpx.URL:
        """Resolve ``url`` against the base URL; absolute URLs pass through unchanged."""
        if url is None or url == "":
            return self._base_url
        target = httpx.URL(url)
        if target.is_absolute_url:
            return target
        return self._base_url.join(target)

    # Method helpers -----------------------------------------------------

    async def head(self, url: httpx.URL | str | None = None, *, params: QueryInput = None) -> None:
        await self.request("HEAD", url, params=params)

    async def get(
        self,
        url: httpx.URL | str | None = None,
        *,
        params: QueryInput = None,
        result_type: Any = None,
    ) -> Any:
        return await self.request("GET", url, params=params, result_type=result_type)

    async def post(
        self,
        url: httpx.URL | str | None = None,
        body: Any = None,
        *,
        result_type: Any = None,
    ) -> Any:
        return await self.request("POST", url, body=body, result_type=result_type)

    async def put(
        self,
        url: httpx.URL | str | None = None,
        body: Any = None,
        *,
        result_type: Any = None,
    ) -> Any:
        return await self.request("PUT", url, body=body, result_type=result_type)

    async def delete(
        self, url: httpx.URL | str | None = None, *, result_type: Any = None
    ) -> Any:
        return await self.request("DELETE", url, result_type=result_type)

    # Request pipeline ---------------------------------------------------

    async def request(
        self,
        method: str,
        url: httpx.URL | str | None = None,
        *,
        body: Any = None,
        params: QueryInput = None,
        result_type: Any = None,
    ) -> Any:
        """Perform one Parse API call.

        Args:
            method: HTTP method
            url: Absolute URL, path relative to the base URL, or None for the base URL
            body: Value to send as JSON; pydantic models are dumped by alias
            params: Query mapping or a sequence of ``parse_client.params`` builders
            result_type: Type to decode a 2xx/3xx body into; None discards the body

        Returns:
            The decoded body, or None when ``result_type`` is None

        Raises:
            ParseError: with ``kind`` describing which stage failed
        """
        method = method.upper()
        target = self.resolve_url(url)
        try:
            query = self._query_params(params)
        except ParseError as exc:
            raise self._error(exc.kind, exc.detail, method, target) from self._chained(exc)
        if query:
            target = target.copy_merge_params(query)

        headers = {"User-Agent": USER_AGENT}
        try:
            if not self._application_id:
                raise ParseError.empty_field("application_id")
            self._credentials.apply(headers)
        except ParseError as exc:
            error = self._error(exc.kind, exc.detail, method, target, field=exc.field)
            raise error from self._chained(exc)
        headers[APPLICATION_ID_HEADER] = self._application_id

        content: bytes | None = None
        if body is not None:
            try:
                content = self._encode_body(body)
            except (TypeError, ValueError) as exc:
                error = self._error(ErrorKind.SERIALIZATION, str(exc), method, target, cause=exc)
                raise error from self._chained(exc)
            headers["Content-Type"] = "application/json"
            # Parse rejects chunked uploads, so the length is always explicit.
            headers["Content-Length"] = str(len(content))

        request = self._http.build_request(method, target, headers=headers, content=content)
        logger.debug(f"Parse request: {method} {self._redactor(str(target))}")

        try:
            response = await self._http.send(request, stream=True)
        except httpx.HTTPError as exc:
            error = self._error(ErrorKind.TRANSPORT, str(exc), method, target, cause=exc)
            raise error from self._chained(exc)

        try:
            try:
                raw = await response.aread()
            except httpx.HTTPError as exc:
                error = self._error(
                    ErrorKind.TRANSPORT, str(exc), method, target, response=response, cause=exc
                )
                raise error from self._chained(exc)
        finally:
            await response.aclose()

        logger.debug(
            f"Parse response: {method} {self._redactor(str(target))} -> {response.status_code}"
        )

        if not 200 <= response.status_code <= 399:
            raise self._classify_failure(method, target, response, raw)

        if result_type is None:
            return None
        try:
            return TypeAdapter(result_type).validate_json(raw)
        except ValidationError as exc:
            error = self._error(
                ErrorKind.DECODE,
                _decode_detail(exc),
                method,
                target,
                response=response,
                body=raw.decode("utf-8", errors="replace"),
                cause=exc,
            )
            raise error from self._chained(exc)

    @staticmethod
    def _query_params(params: QueryInput) -> dict[str, Any]:
        if not params:
            return {}
        if isinstance(params, Mapping):
            return {key: value for key, value in params.items() if value is not None}
        return param_values(*params)

    @staticmethod
    def _encode_body(body: Any) -> bytes:
        if isinstance(body, BaseModel):
            # Dumped in python mode so non-finite floats reach json.dumps instead of
            # being written as null.
            payload = body.model_dump(by_alias=True, exclude_none=True)
            return _dumps(payload, default=to_jsonable_python)
        return _dumps(body)

    def _classify_failure(
        self, method: str, target: httpx.URL, response: httpx.Response, raw: bytes
    ) -> ParseError:
        text = raw.decode("utf-8", errors="replace")
        structured: StructuredError | None = None
        try:
            payload = json.loads(raw) if raw.strip() else None
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            try:
                structured = StructuredError.model_validate(payload)
            except ValidationError:
                structured = None

        if structured is not None and (structured.code or structured.message):
            return self._error(
                ErrorKind.API,
                api_error_detail(structured.code, self._redactor(structured.message)),
                method,
                target,
                response=response,
                code=structured.code or None,
                message=self._redactor(structured.message) or None,
                body=text,
            )

        detail = f"undecodable error body: {text}" if text else "empty error body"
        return self._error(ErrorKind.RAW, detail, method, target, response=response, body=text)

    def _error(
        self,
        kind: ErrorKind,
        detail: str,
        method: str,
        target: httpx.URL,
        *,
        response: httpx.Response | None = None,
        body: str | None = None,
        cause: BaseException | None = None,
        **extra: Any,
    ) -> ParseError:
        redact = self._redactor
        return ParseError(
            kind,
            detail=redact(detail),
            method=method,
            url=redact(str(target)),
            status_code=response.status_code if response is not None else None,
            reason=response.reason_phrase if response is not None else None,
            body=redact(body) if body is not None else None,
            cause=type(cause).__name__ if cause is not None else None,
            **extra,
        )

    def _chained(self, exc: BaseException) -> BaseException | None:
        """Return the exception to chain as ``__cause__``; nothing when redacting."""
        return None if self._redactor.enabled else exc


def _dumps(value: Any, **kwargs: Any) -> bytes:
    return json.dumps(value, separators=(",", ":"), allow_nan=False, **kwargs).encode("utf-8")


def _decode_detail(exc: ValidationError) -> str:
    errors = exc.errors(include_url=False)
    if errors and errors[0].get("type") == "json_invalid":
        return f"invalid JSON response body: {errors[0].get('msg')}"
    return f"response body does not match the expected shape: {exc.error_count()} error(s)"
