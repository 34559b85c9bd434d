from __future__ import annotations

from collections.abc import Mapping

import httpx

from modelscan.core.config.schema import AppConfig
from modelscan.core.providers.anthropic_adapter import AnthropicProvider
from modelscan.core.providers.deepseek_adapter import DeepSeekProvider
from modelscan.core.providers.http_provider import HTTPProvider
from modelscan.core.providers.mistral_adapter import MistralProvider
from modelscan.core.providers.openai_adapter import OpenAIProvider
from modelscan.core.providers.registry import ProviderFactory, ProviderRegistry
from modelscan.core.providers.voyage_adapter import VoyageAIProvider

BUILTIN_PROVIDERS: tuple[type[HTTPProvider], ...] = (
    AnthropicProvider,
    DeepSeekProvider,
    MistralProvider,
    OpenAIProvider,
    VoyageAIProvider,
)


def _factory(
    provider_cls: type[HTTPProvider],
    *,
    base_url: str | None,
    timeout_seconds: float,
    discovery_retry_attempts: int,
    transport: httpx.AsyncBaseTransport | None,
) -> ProviderFactory:
    def build(credential: str) -> HTTPProvider:
        return provider_cls(
            credential,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            discovery_retry_attempts=discovery_retry_attempts,
            transport=transport,
        )

    return build


def build_default_registry(
    *,
    timeout_seconds: float = 30.0,
    discovery_retry_attempts: int = 2,
    base_urls: Mapping[str, str | None] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ProviderRegistry:
    registry = ProviderRegistry()
    base_urls = base_urls or {}
    for provider_cls in BUILTIN_PROVIDERS:
        registry.register(
            provider_cls.name,
            _factory(
                provider_cls,
                base_url=base_urls.get(provider_cls.name),
                timeout_seconds=timeout_seconds,
                discovery_retry_attempts=discovery_retry_attempts,
                transport=transport,
            ),
        )
    return registry


def registry_from_config(cfg: AppConfig, transport: httpx.AsyncBaseTransport | None = None) -> ProviderRegistry:
    return build_default_registry(
        timeout_seconds=cfg.runtime.request_timeout_seconds,
        discovery_retry_attempts=cfg.runtime.discovery_retry_attempts,
        base_urls={name: provider.base_url for name, provider in cfg.providers.items()},
        transport=transport,
    )
