from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from modelscan.core.config.schema import AppConfig
from modelscan.core.providers.registry import ProviderRegistry


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    content = yaml.safe_load(path.read_text(encoding="utf-8"))
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return content


def load_app_config(
    defaults_path: str | Path = "config/defaults.yaml",
    instance_path: str | Path | None = None,
) -> AppConfig:
    defaults = _load_yaml(Path(defaults_path))

    explicit_instance = instance_path or os.getenv("MODELSCAN_CONFIG_FILE")
    instance = _load_yaml(Path(explicit_instance)) if explicit_instance else {}

    merged = _deep_merge(defaults, instance)

    env_log_level = os.getenv("MODELSCAN_LOG_LEVEL")
    if env_log_level:
        merged = _deep_merge(merged, {"telemetry": {"log_level": env_log_level}})

    try:
        return AppConfig.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid modelscan configuration: {exc}") from exc


def credential_env_var(cfg: AppConfig, name: str) -> str:
    provider = cfg.providers.get(name)
    if provider is not None and provider.api_key_env:
        return provider.api_key_env
    return f"{name.upper()}_API_KEY"


def resolve_credential(cfg: AppConfig, name: str) -> str | None:
    value = os.getenv(credential_env_var(cfg, name), "").strip()
    return value or None


def configured_provider_names(cfg: AppConfig, registry: ProviderRegistry) -> list[str]:
    """Registered, enabled providers that have a credential available."""
    names: list[str] = []
    for name in registry.list_providers():
        provider = cfg.providers.get(name)
        if provider is not None and not provider.enabled:
            continue
        if resolve_credential(cfg, name):
            names.append(name)
    return names
