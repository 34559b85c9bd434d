from __future__ import annotations

from modelscan.core.providers.http_provider import HTTPProvider
from modelscan.core.providers.models import Endpoint, Model, ProviderCapabilities
from modelscan.core.runtime.errors import DecodeError, RemoteError

# Voyage has no discovery endpoint.
_CATALOG = (
    ("voyage-2", "Voyage 2: General-purpose embeddings", ("embeddings", "general-purpose"), "1024"),
    ("voyage-code-2", "Voyage Code 2: Code-optimized embeddings", ("embeddings", "code"), "1536"),
    ("voyage-large-2", "Voyage Large 2: High-performance embeddings", ("embeddings", "high-performance"), "1536"),
)


def catalog() -> list[Model]:
    return [
        Model(
            id=model_id,
            name=name,
            context_window=16000,
            categories=categories,
            capabilities={"embedding_dimension": dimension, "max_batch_size": "128"},
        )
        for model_id, name, categories, dimension in _CATALOG
    ]


class VoyageAIProvider(HTTPProvider):
    name = "voyageai"
    default_base_url = "https://api.voyageai.com/v1"

    async def list_models(self, verbose: bool = False) -> list[Model]:
        models = catalog()
        self._log(verbose, "model_catalog_returned", models=len(models))
        return models

    def get_capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_embeddings=True,
            supported_parameters=("input_type", "truncation_type"),
            max_requests_per_minute=60,
            max_tokens_per_request=16000,
        )

    def _build_endpoints(self) -> list[Endpoint]:
        return [
            Endpoint("/embeddings", "POST", "Create embeddings", test_params={"input": "test", "model": "voyage-2"}),
        ]

    async def probe_endpoint(self, endpoint: Endpoint) -> None:
        response = await self._send(endpoint.method, endpoint.path, json_body=endpoint.test_params, headers=endpoint.headers)
        if response.status_code >= 400:
            raise RemoteError(f"HTTP {response.status_code}", status_code=response.status_code, provider=self.name)

    async def test_model(self, model_id: str, verbose: bool = False) -> None:
        self._log(verbose, "model_test_started", model=model_id)
        response = await self._send("POST", "/embeddings", json_body={"input": "test embedding", "model": model_id})
        self._ensure_success(response)
        body = self._decode(response)
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, list):
            raise DecodeError("embeddings response has no 'data' list", provider=self.name)
        dimension = len(data[0].get("embedding") or []) if data and isinstance(data[0], dict) else 0
        usage = body.get("usage") or {}
        self._log(verbose, "model_test_passed", model=model_id, dimension=dimension, tokens=usage.get("total_tokens"))
