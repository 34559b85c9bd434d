from __future__ import annotations

from dataclasses import replace

from modelscan.core.providers.enrichment import ModelProfile, ProfileRule, apply_profile, contains_any, has_prefix, select_profile
from modelscan.core.providers.http_provider import OpenAICompatibleProvider
from modelscan.core.providers.models import Endpoint, Model, ProviderCapabilities

_SKIP_PREFIXES = (
    "text-embedding",
    "embedding",
    "whisper",
    "tts",
    "text-moderation",
    "dall-e",
    "davinci-edit",
    "babbage-edit",
)

_NAME_PREFIXES = (
    ("gpt-4o", "GPT-4 Omni"),
    ("gpt-4-turbo", "GPT-4 Turbo"),
    ("gpt-4", "GPT-4"),
    ("gpt-3.5", "GPT-3.5"),
    ("o1", "O-Series Reasoning"),
    ("o3", "O-Series Reasoning"),
)

# order matters: the first matching prefix wins
OPENAI_RULES = (
    ProfileRule(
        ModelProfile(0.15, 0.60, 128000, 16384, ("chat", "fast", "cost-effective", "vision"), supports_images=True),
        prefixes=("gpt-4o-mini",),
    ),
    ProfileRule(
        ModelProfile(2.50, 10.00, 128000, 16384, ("chat", "multimodal", "vision", "premium"), True, True),
        prefixes=("gpt-4o",),
    ),
    ProfileRule(ModelProfile(10.00, 30.00, 128000, 4096, ("chat", "premium", "legacy"), can_reason=True), prefixes=("gpt-4-turbo",)),
    ProfileRule(ModelProfile(30.00, 60.00, 8192, 4096, ("chat", "premium", "legacy"), can_reason=True), prefixes=("gpt-4",)),
    ProfileRule(ModelProfile(1.50, 2.00, 4096, 4096, ("completion", "legacy")), prefixes=("gpt-3.5-turbo-instruct",)),
    ProfileRule(ModelProfile(0.50, 1.50, 16385, 4096, ("chat", "cost-effective", "legacy")), prefixes=("gpt-3.5-turbo",)),
    ProfileRule(ModelProfile(3.00, 12.00, 128000, 65536, ("reasoning", "problem-solving", "fast"), can_reason=True), prefixes=("o1-mini",)),
    ProfileRule(ModelProfile(15.00, 60.00, 128000, 100000, ("reasoning", "problem-solving", "premium"), can_reason=True), prefixes=("o1",)),
    ProfileRule(ModelProfile(20.00, 80.00, 128000, 100000, ("reasoning", "multimodal", "premium"), True, True), prefixes=("o3",)),
)
OPENAI_DEFAULT = ModelProfile(1.00, 2.00, 8192, 4096, ("chat",))


def is_chat_model(model_id: str) -> bool:
    if has_prefix(model_id, _SKIP_PREFIXES):
        return False
    if "davinci" in model_id and "gpt" not in model_id:
        return False
    return not contains_any(model_id, ("curie", "babbage", "ada"))


def enrich_model(model: Model) -> Model:
    profile = select_profile(model.id, OPENAI_RULES, OPENAI_DEFAULT)
    # vision on the older gpt-4 tiers depends on the variant, not the tier
    if model.id.startswith("gpt-4-turbo") and contains_any(model.id, ("vision", "preview")):
        profile = replace(profile, supports_images=True)
    elif model.id.startswith("gpt-4") and not model.id.startswith(("gpt-4o", "gpt-4-turbo")) and "vision" in model.id:
        profile = replace(profile, supports_images=True)
    return apply_profile(
        model,
        profile,
        capabilities={"function_calling": "full", "json_mode": "supported", "streaming": "supported"},
    )


class OpenAIProvider(OpenAICompatibleProvider):
    name = "openai"
    default_base_url = "https://api.openai.com/v1"

    def include_model(self, model_id: str) -> bool:
        return is_chat_model(model_id)

    def format_model_name(self, model_id: str) -> str:
        for prefix, label in _NAME_PREFIXES:
            if model_id.startswith(prefix):
                return f"{label}: {model_id}"
        return model_id

    def enrich_model(self, model: Model) -> Model:
        return enrich_model(model)

    def get_capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_chat=True,
            supports_embeddings=True,
            supports_fine_tuning=True,
            supports_agents=True,
            supports_file_upload=True,
            supports_streaming=True,
            supports_json_mode=True,
            supports_vision=True,
            supports_audio=True,
            supported_parameters=("temperature", "max_tokens", "top_p", "frequency_penalty", "presence_penalty", "stop"),
            security_features=("moderation_endpoint", "content_filtering"),
            max_requests_per_minute=500,
            max_tokens_per_request=128000,
        )

    def _build_endpoints(self) -> list[Endpoint]:
        return [
            Endpoint(
                "/chat/completions",
                "POST",
                "Create a chat completion",
                test_params={
                    "model": "gpt-4o-mini",
                    "messages": [{"role": "user", "content": "Hi"}],
                    "max_tokens": 5,
                },
            ),
            Endpoint("/models", "GET", "List available models"),
            Endpoint(
                "/embeddings",
                "POST",
                "Create embeddings",
                test_params={"model": "text-embedding-3-small", "input": "test"},
            ),
        ]
