"""Shared HTTP plumbing for the built-in adapters.

Maps transport problems to :class:`RemoteError`, unbuildable requests to
:class:`SetupError` and unparseable bodies to :class:`DecodeError`, so adapters
only describe paths, payloads and metadata tables.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_fixed

from modelscan.core.providers.base import Provider
from modelscan.core.providers.enrichment import unix_to_iso
from modelscan.core.providers.models import Endpoint, Model
from modelscan.core.runtime.errors import DecodeError, RemoteError, SetupError, compact_message

DEFAULT_PROBE_PAYLOAD = {"test": "true"}


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, RemoteError) and exc.transient


def stringify_capabilities(raw: Any) -> dict[str, str]:
    if not isinstance(raw, Mapping):
        return {}
    out: dict[str, str] = {}
    for key, value in raw.items():
        if isinstance(value, bool):
            out[str(key)] = "true" if value else "false"
        else:
            out[str(key)] = str(value)
    return out


class HTTPProvider(Provider):
    default_base_url: str = ""
    # some vendors answer a synthetic payload with 400 even though the route exists
    accepts_bad_request_probe: bool = False
    retry_wait_seconds: float = 0.2

    def __init__(
        self,
        credential: str,
        *,
        base_url: str | None = None,
        timeout_seconds: float = 30.0,
        discovery_retry_attempts: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(credential)
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.discovery_retry_attempts = max(1, discovery_retry_attempts)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.credential}"}

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout_seconds),
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        merged = httpx.Headers(self._auth_headers())
        merged.update(headers or {})
        content = None
        if json_body is not None:
            try:
                content = json.dumps(json_body).encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise SetupError(f"cannot encode request payload: {exc}", provider=self.name) from exc
            if "content-type" not in merged:
                merged["Content-Type"] = "application/json"

        try:
            return await self.client.request(method, path, content=content, headers=merged)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise SetupError(f"cannot build request for {path}: {exc}", provider=self.name) from exc
        except httpx.TimeoutException as exc:
            raise RemoteError(f"request timed out: {method} {path}", provider=self.name) from exc
        except httpx.HTTPError as exc:
            raise RemoteError(f"request failed: {exc}", provider=self.name) from exc

    def _ensure_success(self, response: httpx.Response) -> None:
        if 200 <= response.status_code < 300:
            return
        body = compact_message(response.text, max_len=200)
        message = f"HTTP {response.status_code}: {body}" if body else f"HTTP {response.status_code}"
        raise RemoteError(message, status_code=response.status_code, provider=self.name)

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content:
            raise DecodeError("empty response body", provider=self.name)
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"invalid JSON response: {exc}", provider=self.name) from exc

    async def _get_json(self, path: str) -> Any:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.discovery_retry_attempts),
            wait=wait_fixed(self.retry_wait_seconds),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        ):
            with attempt:
                response = await self._send("GET", path)
        self._ensure_success(response)
        return self._decode(response)

    async def probe_endpoint(self, endpoint: Endpoint) -> None:
        if endpoint.method in ("POST", "PUT"):
            payload = endpoint.test_params if endpoint.test_params is not None else DEFAULT_PROBE_PAYLOAD
            response = await self._send(endpoint.method, endpoint.path, json_body=payload, headers=endpoint.headers)
        else:
            response = await self._send(endpoint.method, endpoint.path, headers=endpoint.headers)

        if response.status_code == 400 and endpoint.method != "GET" and self.accepts_bad_request_probe:
            if not response.content:
                raise DecodeError("empty response body", provider=self.name)
            return
        self._ensure_success(response)
        if endpoint.method != "DELETE":
            self._decode(response)

    def _test_model_request(self, model_id: str) -> tuple[str, dict[str, Any]]:
        return "/chat/completions", {
            "model": model_id,
            "messages": [{"role": "user", "content": "Say 'test'"}],
            "max_tokens": 5,
        }

    async def test_model(self, model_id: str, verbose: bool = False) -> None:
        self._log(verbose, "model_test_started", model=model_id)
        path, payload = self._test_model_request(model_id)
        response = await self._send("POST", path, json_body=payload)
        self._ensure_success(response)
        self._log(verbose, "model_test_passed", model=model_id)


class OpenAICompatibleProvider(HTTPProvider):
    """Adapters whose discovery endpoint returns ``{"data": [{"id": ...}, ...]}``."""

    models_path = "/models"

    def include_model(self, model_id: str) -> bool:
        return True

    def format_model_name(self, model_id: str) -> str:
        return model_id

    def enrich_model(self, model: Model) -> Model:
        return model

    def _parse_model(self, item: Mapping[str, Any]) -> Model:
        model_id = item["id"]
        if not isinstance(model_id, str):
            raise TypeError(f"model id must be a string, got {type(model_id).__name__}")
        return Model(
            id=model_id,
            name=self.format_model_name(model_id),
            description=item.get("description") or "",
            created_at=unix_to_iso(item.get("created")),
            capabilities=stringify_capabilities(item.get("capabilities")),
        )

    async def list_models(self, verbose: bool = False) -> list[Model]:
        self._log(verbose, "model_discovery_started", path=self.models_path)
        body = await self._get_json(self.models_path)
        items = body.get("data") if isinstance(body, dict) else None
        if not isinstance(items, list):
            raise DecodeError("models response has no 'data' list", provider=self.name)

        models: list[Model] = []
        for item in items:
            try:
                model = self._parse_model(item)
            except (KeyError, TypeError, ValueError, OverflowError, OSError) as exc:
                raise DecodeError(f"unexpected model entry: {exc!r}", provider=self.name) from exc
            if not self.include_model(model.id):
                continue
            models.append(self.enrich_model(model))

        self._log(verbose, "model_discovery_finished", models=len(models))
        return models
