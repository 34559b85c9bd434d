from __future__ import annotations

from typing import Any

from modelscan.core.providers.enrichment import ModelProfile, ProfileRule, apply_profile, select_profile
from modelscan.core.providers.http_provider import HTTPProvider
from modelscan.core.providers.models import Endpoint, Model, ProviderCapabilities
from modelscan.core.runtime.errors import DecodeError

ANTHROPIC_VERSION = "2023-06-01"
PROBE_MODEL = "claude-sonnet-4-5-20250929"

ANTHROPIC_RULES = (
    ProfileRule(ModelProfile(5.00, 25.00, 200000, 64000, ("chat", "reasoning", "premium"), True, True), substrings=("opus-4",)),
    ProfileRule(ModelProfile(3.00, 15.00, 200000, 64000, ("chat", "reasoning", "balanced"), True, True), substrings=("sonnet-4",)),
    ProfileRule(ModelProfile(1.00, 5.00, 200000, 64000, ("chat", "fast", "cost-effective"), True, True), substrings=("haiku-4",)),
    ProfileRule(ModelProfile(15.00, 75.00, 200000, 4096, ("chat", "premium", "legacy"), True, True), substrings=("opus-3.5",)),
    ProfileRule(ModelProfile(3.00, 15.00, 200000, 8192, ("chat", "balanced", "legacy"), True, True), substrings=("sonnet-3.5",)),
    ProfileRule(ModelProfile(0.80, 4.00, 200000, 4096, ("chat", "fast", "legacy"), True, True), substrings=("haiku-3.5",)),
)
ANTHROPIC_DEFAULT = ModelProfile(3.00, 15.00, 200000, 4096, ("chat",), True, True)

_CAPABILITIES = {
    "vision": "high",
    "function_calling": "full",
    "json_mode": "supported",
    "streaming": "supported",
    "extended_thinking": "supported",
}


def enrich_model(model: Model) -> Model:
    profile = select_profile(model.id, ANTHROPIC_RULES, ANTHROPIC_DEFAULT)
    return apply_profile(model, profile, capabilities=_CAPABILITIES)


class AnthropicProvider(HTTPProvider):
    name = "anthropic"
    default_base_url = "https://api.anthropic.com/v1"

    def _auth_headers(self) -> dict[str, str]:
        return {"x-api-key": self.credential, "anthropic-version": ANTHROPIC_VERSION}

    def _parse_model(self, item: dict[str, Any]) -> Model:
        created = item.get("created_at") or None
        day = created[:10] if isinstance(created, str) else "an unknown date"
        return Model(
            id=item["id"],
            name=item.get("display_name") or item["id"],
            description=f"Anthropic Claude model created at {day}",
            created_at=created,
        )

    async def list_models(self, verbose: bool = False) -> list[Model]:
        self._log(verbose, "model_discovery_started", path="/models")
        body = await self._get_json("/models")
        items = body.get("data") if isinstance(body, dict) else None
        if not isinstance(items, list):
            raise DecodeError("models response has no 'data' list", provider=self.name)
        try:
            models = [enrich_model(self._parse_model(item)) for item in items]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise DecodeError(f"unexpected model entry: {exc!r}", provider=self.name) from exc
        self._log(verbose, "model_discovery_finished", models=len(models))
        return models

    def get_capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_chat=True,
            supports_agents=True,
            supports_file_upload=True,
            supports_streaming=True,
            supports_json_mode=True,
            supports_vision=True,
            supported_parameters=("temperature", "max_tokens", "top_p", "top_k", "stop_sequences"),
            security_features=("prompt_caching", "batch_api", "extended_thinking"),
            max_requests_per_minute=50,
            max_tokens_per_request=200000,
        )

    def _build_endpoints(self) -> list[Endpoint]:
        return [
            Endpoint(
                "/messages",
                "POST",
                "Create a message (chat completion)",
                headers={**self._auth_headers(), "content-type": "application/json"},
                test_params={
                    "model": PROBE_MODEL,
                    "max_tokens": 10,
                    "messages": [{"role": "user", "content": "Hi"}],
                },
            ),
            Endpoint("/models", "GET", "List available models", headers=self._auth_headers()),
        ]

    def _test_model_request(self, model_id: str) -> tuple[str, dict[str, Any]]:
        return "/messages", {
            "model": model_id,
            "max_tokens": 10,
            "messages": [{"role": "user", "content": "Say 'test successful' in 2 words"}],
        }
