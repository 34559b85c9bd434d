from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict
from typing import Any, TextIO

from pydantic import BaseModel, Field

from modelscan.core.config.loader import configured_provider_names, resolve_credential
from modelscan.core.config.schema import AppConfig
from modelscan.core.providers.base import Provider
from modelscan.core.providers.models import Endpoint, summarize_endpoints
from modelscan.core.providers.registry import ProviderRegistry
from modelscan.core.runtime.errors import ProviderError, UnknownProviderError, compact_error_summary
from modelscan.core.telemetry.logging import get_logger

logger = get_logger(__name__)


class EndpointCheckResult(BaseModel):
    method: str
    path: str
    description: str = ""
    status: str
    latency_ms: float | None = None
    error: str | None = None


class ProviderScanResult(BaseModel):
    provider: str
    enabled: bool = True
    ok: bool = False
    endpoints: list[EndpointCheckResult] = Field(default_factory=list)
    models: list[dict[str, Any]] = Field(default_factory=list)
    model_count: int = 0
    capabilities: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None

    @property
    def working_endpoints(self) -> int:
        return sum(1 for ep in self.endpoints if ep.status == "working")


def endpoint_results(endpoints: Sequence[Endpoint]) -> list[EndpointCheckResult]:
    return [
        EndpointCheckResult(
            method=ep.method,
            path=ep.path,
            description=ep.description,
            status=ep.status.value,
            latency_ms=round(ep.latency * 1000, 2) if ep.latency else None,
            error=ep.error or None,
        )
        for ep in endpoints
    ]


async def scan_provider(
    name: str,
    provider: Provider,
    *,
    verbose: bool = False,
    timeout_seconds: float | None = None,
    skip_models: bool = False,
    stream: TextIO | None = None,
) -> ProviderScanResult:
    """Validate endpoints and list models, capturing failures in the result."""
    result = ProviderScanResult(provider=name, capabilities=asdict(provider.get_capabilities()))
    errors: list[str] = []

    try:
        await provider.validate_endpoints(verbose=verbose, timeout_seconds=timeout_seconds, stream=stream)
    except ProviderError as exc:
        errors.append(f"endpoint validation failed: {compact_error_summary(exc)}")
    endpoints = provider.get_endpoints()
    result.endpoints = endpoint_results(endpoints)
    summary = summarize_endpoints(endpoints)

    if not skip_models:
        try:
            models = await provider.list_models(verbose=verbose)
            result.models = [m.to_dict() for m in models]
            result.model_count = len(models)
        except ProviderError as exc:
            errors.append(f"model listing failed: {compact_error_summary(exc)}")

    if summary.all_failed:
        errors.append("all endpoints failed")

    result.error = "; ".join(errors) or None
    result.ok = not errors
    logger.info(
        "provider_scanned",
        provider=name,
        ok=result.ok,
        working=summary.working,
        failed=summary.failed,
        models=result.model_count,
    )
    return result


async def scan_configured_providers(
    cfg: AppConfig,
    registry: ProviderRegistry,
    names: Sequence[str] | None = None,
    *,
    verbose: bool = False,
    timeout_seconds: float | None = None,
    skip_models: bool = False,
    stream: TextIO | None = None,
) -> dict[str, ProviderScanResult]:
    selected = list(names) if names else configured_provider_names(cfg, registry)
    results: dict[str, ProviderScanResult] = {}

    for name in selected:
        if name not in registry:
            results[name] = ProviderScanResult(provider=name, enabled=False, error=str(UnknownProviderError(name)))
            continue
        provider_cfg = cfg.providers.get(name)
        if provider_cfg is not None and not provider_cfg.enabled:
            results[name] = ProviderScanResult(provider=name, enabled=False, error="disabled")
            continue
        credential = resolve_credential(cfg, name)
        if not credential:
            results[name] = ProviderScanResult(provider=name, error="missing api key in env")
            continue

        async with registry.create(name, credential) as provider:
            results[name] = await scan_provider(
                name,
                provider,
                verbose=verbose,
                timeout_seconds=timeout_seconds,
                skip_models=skip_models,
                stream=stream,
            )
    return results
