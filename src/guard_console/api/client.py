"""Async client for the console's paginated REST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Mapping, TypeVar

import httpx

from guard_console.domain.kinds import EntityKind, FlagEndpoint, KindSpec, get_kind_spec
from guard_console.domain.models import Entity, PageEnvelope, Query
from guard_console.errors import ConsoleError, TransportFailure, ValidationRejected
from guard_console.utils.http import bool_param, extract_error_message

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiOutcome(str, Enum):
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ApiResult(Generic[T]):
    """Tagged result of a remote call.

    Callers branch on ``outcome`` rather than on exceptions: an HTTP 200 whose
    body says ``success: false`` is still ``REJECTED``.
    """

    outcome: ApiOutcome
    value: T | None = None
    error: ConsoleError | None = None

    @classmethod
    def ok(cls, value: T | None = None) -> "ApiResult[T]":
        return cls(ApiOutcome.FULFILLED, value=value)

    @classmethod
    def failed(cls, error: ConsoleError) -> "ApiResult[T]":
        return cls(ApiOutcome.REJECTED, error=error)

    @property
    def fulfilled(self) -> bool:
        return self.outcome is ApiOutcome.FULFILLED

    @property
    def error_message(self) -> str | None:
        return str(self.error) if self.error is not None else None


class ConsoleApiClient:
    """Fetch, show and mutate console records.

    Every method returns an :class:`ApiResult`; transport errors, HTTP error
    statuses and domain-level ``success: false`` bodies are all captured as
    ``REJECTED`` results and never raised.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout_seconds
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Mapping[str, Any] | None = None,
    ) -> ApiResult[Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers(),
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                resp = await client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            return ApiResult.failed(TransportFailure(f"Request failed: {exc}"))

        try:
            payload = resp.json()
        except ValueError:
            payload = None

        if resp.status_code == 401:
            logger.warning("%s %s rejected as unauthorized", method, path)
        if resp.status_code >= 500:
            message = extract_error_message(payload, f"Server error ({resp.status_code})")
            return ApiResult.failed(TransportFailure(message, status_code=resp.status_code))
        if resp.status_code >= 400:
            message = extract_error_message(payload, f"Request rejected ({resp.status_code})")
            return ApiResult.failed(ValidationRejected(message, status_code=resp.status_code))

        if resp.status_code == 204:
            return ApiResult.ok(None)
        if not isinstance(payload, Mapping):
            return ApiResult.failed(
                TransportFailure("Malformed response body", status_code=resp.status_code)
            )
        if not payload.get("success", False):
            message = extract_error_message(payload, "Request failed")
            return ApiResult.failed(ValidationRejected(message, status_code=resp.status_code))

        logger.debug("%s %s -> %s", method, path, resp.status_code)
        return ApiResult.ok(payload.get("body"))

    async def fetch(self, kind: EntityKind | str, query: Query) -> ApiResult[PageEnvelope]:
        spec = get_kind_spec(kind)
        result = await self._request("GET", spec.list_path(), params=query.to_params())
        if not result.fulfilled:
            return result
        body = result.value if isinstance(result.value, Mapping) else {}
        try:
            return ApiResult.ok(PageEnvelope.from_body(spec.kind, body, query))
        except (TypeError, ValueError) as exc:
            logger.warning("Malformed %s page: %s", spec.noun, exc)
            return ApiResult.failed(TransportFailure(f"Malformed {spec.noun} page: {exc}"))

    async def show(self, kind: EntityKind | str, entity_id: int) -> ApiResult[Entity]:
        spec = get_kind_spec(kind)
        result = await self._request("GET", spec.show_path(entity_id))
        if not result.fulfilled:
            return result
        body = result.value
        record = body.get("item", body) if isinstance(body, Mapping) else None
        if not isinstance(record, Mapping):
            return ApiResult.failed(TransportFailure(f"Malformed {spec.noun} record"))
        try:
            return ApiResult.ok(Entity.from_payload(spec.kind, record))
        except (TypeError, ValueError) as exc:
            return ApiResult.failed(TransportFailure(f"Malformed {spec.noun} record: {exc}"))

    async def change_status(
        self, kind: EntityKind | str, entity_id: int, status: str
    ) -> ApiResult[Any]:
        spec = get_kind_spec(kind)
        endpoint = spec.status_endpoint
        if endpoint is None:
            raise ValueError(f"{spec.noun} records have no status endpoint")
        path = endpoint.path.format(id=entity_id)
        value = {endpoint.param: status}
        if endpoint.in_query:
            return await self._request(endpoint.method, path, params=value)
        return await self._request(endpoint.method, path, json=value)

    async def set_flag(
        self, kind: EntityKind | str, entity_id: int, flag: str, value: bool
    ) -> ApiResult[Any]:
        spec = get_kind_spec(kind)
        endpoint = _flag_endpoint(spec, flag)
        path = endpoint.path.format(id=entity_id)
        payload = {endpoint.param or flag: bool_param(value, numeric=endpoint.numeric)}
        if endpoint.in_query:
            return await self._request(endpoint.method, path, params=payload)
        return await self._request(endpoint.method, path, json=payload)

    async def set_visibility(
        self, kind: EntityKind | str, entity_id: int, flag: str, visible: bool
    ) -> ApiResult[Any]:
        if not flag.startswith("is_visible_to_"):
            raise ValueError(f"'{flag}' is not a visibility flag")
        return await self.set_flag(kind, entity_id, flag, visible)

    async def set_active(
        self, kind: EntityKind | str, entity_id: int, active: bool
    ) -> ApiResult[Any]:
        return await self.set_flag(kind, entity_id, "is_active", active)

    async def delete(self, kind: EntityKind | str, entity_id: int) -> ApiResult[None]:
        spec = get_kind_spec(kind)
        result = await self._request("DELETE", spec.item_path(entity_id))
        if not result.fulfilled:
            return result
        return ApiResult.ok(None)


def _flag_endpoint(spec: KindSpec, flag: str) -> FlagEndpoint:
    endpoint = spec.flags.get(flag)
    if endpoint is None:
        raise ValueError(f"{spec.noun} records have no '{flag}' flag")
    return endpoint
