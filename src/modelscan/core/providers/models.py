from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from types import MappingProxyType
from typing import Any

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE")


class EndpointStatus(str, Enum):
    UNKNOWN = "unknown"
    WORKING = "working"
    FAILED = "failed"
    DEPRECATED = "deprecated"


@dataclass(frozen=True, slots=True)
class Model:
    """A point-in-time snapshot of one model a provider exposes."""

    id: str
    name: str = ""
    description: str = ""
    created_at: str | None = None
    cost_per_million_input: float = 0.0
    cost_per_million_output: float = 0.0
    context_window: int = 0
    max_output_tokens: int = 0
    supports_images: bool = False
    supports_tools: bool = False
    can_reason: bool = False
    can_stream: bool = False
    deprecated: bool = False
    categories: tuple[str, ...] = ()
    capabilities: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "categories", tuple(self.categories))
        object.__setattr__(self, "capabilities", MappingProxyType(dict(self.capabilities)))
        if not self.id:
            raise ValueError("model id must not be empty")
        for attr in ("cost_per_million_input", "cost_per_million_output", "context_window", "max_output_tokens"):
            if getattr(self, attr) < 0:
                raise ValueError(f"{attr} must not be negative for model {self.id!r}")

    def to_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["categories"] = list(self.categories)
        data["capabilities"] = dict(self.capabilities)
        return data


@dataclass(frozen=True, slots=True)
class EndpointOutcome:
    status: EndpointStatus = EndpointStatus.UNKNOWN
    latency: float = 0.0
    error: str = ""

    @classmethod
    def working(cls, latency: float) -> EndpointOutcome:
        return cls(status=EndpointStatus.WORKING, latency=latency)

    @classmethod
    def failed(cls, latency: float, error: str) -> EndpointOutcome:
        return cls(status=EndpointStatus.FAILED, latency=latency, error=error)


class Endpoint:
    """A remote operation a provider declares for health checks.

    ``path`` and ``method`` are fixed at construction. The probe result lives in
    ``outcome`` and is replaced as a whole by :meth:`record`, so readers always
    see a consistent (status, latency, error) triple.
    """

    __slots__ = ("_path", "_method", "description", "headers", "test_params", "outcome")

    def __init__(
        self,
        path: str,
        method: str = "GET",
        description: str = "",
        headers: dict[str, str] | None = None,
        test_params: Any = None,
        outcome: EndpointOutcome | None = None,
    ) -> None:
        method = method.upper()
        if not path:
            raise ValueError("endpoint path must not be empty")
        if method not in HTTP_METHODS:
            raise ValueError(f"unsupported HTTP method: {method}")
        self._path = path
        self._method = method
        self.description = description
        self.headers = dict(headers or {})
        self.test_params = test_params
        self.outcome = outcome or EndpointOutcome()

    @property
    def path(self) -> str:
        return self._path

    @property
    def method(self) -> str:
        return self._method

    @property
    def status(self) -> EndpointStatus:
        return self.outcome.status

    @property
    def latency(self) -> float:
        return self.outcome.latency

    @property
    def error(self) -> str:
        return self.outcome.error

    def record(self, outcome: EndpointOutcome) -> None:
        self.outcome = outcome

    def __repr__(self) -> str:
        return f"Endpoint({self.method} {self.path} status={self.status.value})"


@dataclass(frozen=True, slots=True)
class ProviderCapabilities:
    supports_chat: bool = False
    supports_fim: bool = False
    supports_embeddings: bool = False
    supports_fine_tuning: bool = False
    supports_agents: bool = False
    supports_file_upload: bool = False
    supports_streaming: bool = False
    supports_json_mode: bool = False
    supports_vision: bool = False
    supports_audio: bool = False
    supported_parameters: tuple[str, ...] = ()
    security_features: tuple[str, ...] = ()
    max_requests_per_minute: int = 0
    max_tokens_per_request: int = 0


@dataclass(slots=True)
class EndpointSummary:
    total: int = 0
    working: int = 0
    failed: int = 0
    unknown: int = 0
    deprecated: int = 0

    @property
    def all_failed(self) -> bool:
        return self.failed > 0 and self.working == 0


def summarize_endpoints(endpoints: Iterable[Endpoint]) -> EndpointSummary:
    summary = EndpointSummary()
    for endpoint in endpoints:
        summary.total += 1
        if endpoint.status is EndpointStatus.WORKING:
            summary.working += 1
        elif endpoint.status is EndpointStatus.FAILED:
            summary.failed += 1
        elif endpoint.status is EndpointStatus.DEPRECATED:
            summary.deprecated += 1
        else:
            summary.unknown += 1
    return summary
