from __future__ import annotations

from modelscan.core.providers.enrichment import ModelProfile, ProfileRule, apply_profile, select_profile
from modelscan.core.providers.http_provider import OpenAICompatibleProvider
from modelscan.core.providers.models import Endpoint, Model, ProviderCapabilities

DEEPSEEK_RULES = (
    ProfileRule(ModelProfile(0.27, 1.10, 64000, 8192, ("chat", "cost-effective")), prefixes=("deepseek-chat",)),
    ProfileRule(ModelProfile(0.55, 2.19, 64000, 8192, ("reasoning", "problem-solving"), can_reason=True), prefixes=("deepseek-reasoner",)),
    ProfileRule(ModelProfile(0.27, 1.10, 64000, 8192, ("coding", "cost-effective")), prefixes=("deepseek-coder",)),
)
DEEPSEEK_DEFAULT = ModelProfile(0.27, 1.10, 64000, 8192, ("chat",))

_NAMES = {
    "deepseek-chat": "DeepSeek Chat",
    "deepseek-reasoner": "DeepSeek Reasoner",
    "deepseek-coder": "DeepSeek Coder",
}


def enrich_model(model: Model) -> Model:
    return apply_profile(
        model,
        select_profile(model.id, DEEPSEEK_RULES, DEEPSEEK_DEFAULT),
        capabilities={"function_calling": "full", "json_mode": "supported", "streaming": "supported"},
    )


class DeepSeekProvider(OpenAICompatibleProvider):
    name = "deepseek"
    default_base_url = "https://api.deepseek.com"

    def format_model_name(self, model_id: str) -> str:
        for prefix, label in _NAMES.items():
            if model_id.startswith(prefix):
                return f"{label}: {model_id}"
        return model_id

    def enrich_model(self, model: Model) -> Model:
        return enrich_model(model)

    def get_capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_chat=True,
            supports_fim=True,
            supports_agents=True,
            supports_streaming=True,
            supports_json_mode=True,
            supported_parameters=("temperature", "max_tokens", "top_p", "frequency_penalty", "presence_penalty", "stop"),
            max_requests_per_minute=100,
            max_tokens_per_request=64000,
        )

    def _build_endpoints(self) -> list[Endpoint]:
        return [
            Endpoint(
                "/chat/completions",
                "POST",
                "Create a chat completion",
                test_params={
                    "model": "deepseek-chat",
                    "messages": [{"role": "user", "content": "Hi"}],
                    "max_tokens": 5,
                },
            ),
            Endpoint("/models", "GET", "List available models"),
        ]
