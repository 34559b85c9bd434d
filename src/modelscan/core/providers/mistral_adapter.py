from __future__ import annotations

from dataclasses import replace

from modelscan.core.providers.enrichment import contains_any
from modelscan.core.providers.http_provider import OpenAICompatibleProvider
from modelscan.core.providers.models import Endpoint, Model, ProviderCapabilities

_CATEGORY_HINTS = (
    ("coding", ("labs-devstral", "devstral", "codestral", "magistral", "mistral-code")),
    ("chat", ("mistral-small", "mistral-medium", "mistral-large", "ministral", "pixtral")),
    ("embedding", ("embed",)),
    ("audio", ("voxtral",)),
)

_DESCRIPTIONS = (
    ("mistral-large", "Top-tier reasoning model for complex, high-value tasks"),
    ("mistral-medium", "Ideal for intermediate tasks requiring moderate reasoning"),
    ("mistral-small", "Cost-efficient model for simple tasks"),
    ("codestral", "Specialized model for code generation and completion"),
    ("embed", "Model for generating text embeddings"),
)


def guess_categories(model_id: str) -> tuple[str, ...]:
    categories = tuple(name for name, hints in _CATEGORY_HINTS if contains_any(model_id, hints))
    return categories or ("general",)


def describe(model_id: str) -> str:
    for hint, text in _DESCRIPTIONS:
        if hint in model_id:
            return text
    return "Mistral AI language model"


def enrich_model(model: Model) -> Model:
    caps = dict(model.capabilities)
    flags = {key: caps.get(key) == "true" for key in ("vision", "function_calling", "completion_chat")}
    if flags["vision"]:
        caps["vision"] = "high"
    if flags["function_calling"]:
        caps["function_calling"] = "full"
    return replace(
        model,
        description=model.description or describe(model.id),
        supports_images=flags["vision"],
        supports_tools=flags["function_calling"],
        can_stream=flags["completion_chat"],
        categories=guess_categories(model.id),
        capabilities=caps,
    )


class MistralProvider(OpenAICompatibleProvider):
    name = "mistral"
    default_base_url = "https://api.mistral.ai/v1"
    accepts_bad_request_probe = True

    def enrich_model(self, model: Model) -> Model:
        return enrich_model(model)

    def get_capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_chat=True,
            supports_fim=True,
            supports_embeddings=True,
            supports_fine_tuning=True,
            supports_agents=True,
            supports_file_upload=True,
            supports_streaming=True,
            supports_json_mode=True,
            supports_vision=True,
            supports_audio=True,
            supported_parameters=(
                "model", "messages", "temperature", "top_p", "max_tokens",
                "min_tokens", "stream", "stop", "random_seed", "response_format",
                "tools", "tool_choice", "safe_prompt", "presence_penalty",
                "frequency_penalty", "n",
            ),
            security_features=("safe_prompt", "content_filtering"),
            max_requests_per_minute=60,
            max_tokens_per_request=200000,
        )

    def _build_endpoints(self) -> list[Endpoint]:
        return [
            Endpoint("/models", "GET", "List available models"),
            Endpoint(
                "/chat/completions",
                "POST",
                "Chat completion endpoint",
                test_params={
                    "model": "mistral-small-latest",
                    "messages": [{"role": "user", "content": "Hello"}],
                    "max_tokens": 10,
                },
            ),
            Endpoint(
                "/fim/completions",
                "POST",
                "Fill-in-the-middle code completion",
                test_params={
                    "model": "codestral-latest",
                    "prompt": "def hello():",
                    "suffix": "    print('Hello')",
                    "max_tokens": 10,
                },
            ),
            Endpoint("/agents", "GET", "List agents"),
            Endpoint(
                "/embeddings",
                "POST",
                "Create embeddings",
                test_params={"model": "mistral-embed", "input": "Test embedding"},
            ),
            Endpoint("/files", "GET", "List uploaded files"),
            Endpoint("/fine_tuning/jobs", "GET", "List fine-tuning jobs"),
        ]
