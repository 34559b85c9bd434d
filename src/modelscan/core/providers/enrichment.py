"""Static model metadata tables.

Adapters describe their pricing tiers as an ordered list of :class:`ProfileRule`
entries; the first rule matching a model id wins and a provider default covers
everything else. All helpers here are pure.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from modelscan.core.providers.models import Model


def contains_any(value: str, substrings: Iterable[str]) -> bool:
    return any(s in value for s in substrings)


def has_prefix(value: str, prefixes: Iterable[str]) -> bool:
    return any(value.startswith(p) for p in prefixes)


def unix_to_iso(timestamp: int | float | None) -> str | None:
    if not timestamp:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True, slots=True)
class ModelProfile:
    cost_in: float
    cost_out: float
    context_window: int
    max_output_tokens: int
    categories: tuple[str, ...] = ("chat",)
    supports_images: bool = False
    can_reason: bool = False


@dataclass(frozen=True, slots=True)
class ProfileRule:
    profile: ModelProfile
    prefixes: tuple[str, ...] = ()
    substrings: tuple[str, ...] = ()

    def matches(self, model_id: str) -> bool:
        return has_prefix(model_id, self.prefixes) or contains_any(model_id, self.substrings)


def select_profile(model_id: str, rules: Iterable[ProfileRule], default: ModelProfile) -> ModelProfile:
    for rule in rules:
        if rule.matches(model_id):
            return rule.profile
    return default


def apply_profile(
    model: Model,
    profile: ModelProfile,
    *,
    capabilities: Mapping[str, str] | None = None,
    supports_tools: bool = True,
    can_stream: bool = True,
) -> Model:
    caps = dict(capabilities or {})
    if profile.supports_images:
        caps.setdefault("vision", "high")
    if profile.can_reason:
        caps.setdefault("reasoning", "advanced")
    return replace(
        model,
        cost_per_million_input=profile.cost_in,
        cost_per_million_output=profile.cost_out,
        context_window=profile.context_window,
        max_output_tokens=profile.max_output_tokens,
        supports_images=profile.supports_images,
        supports_tools=supports_tools,
        can_reason=profile.can_reason,
        can_stream=can_stream,
        categories=profile.categories,
        capabilities=caps,
    )
