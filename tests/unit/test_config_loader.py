from __future__ import annotations

import pytest

from modelscan.core.config.loader import (
    configured_provider_names,
    credential_env_var,
    load_app_config,
    resolve_credential,
)
from modelscan.core.providers.catalog import build_default_registry


def test_config_loader_merges_defaults_and_instance(tmp_path, monkeypatch):
    monkeypatch.delenv("MODELSCAN_LOG_LEVEL", raising=False)
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(
        """
runtime:
  request_timeout_seconds: 30
  discovery_retry_attempts: 2
providers:
  mistral:
    api_key_env: MISTRAL_API_KEY
    base_url: https://api.mistral.ai/v1
""".strip(),
        encoding="utf-8",
    )

    instance = tmp_path / "instance.yaml"
    instance.write_text(
        """
runtime:
  request_timeout_seconds: 5
providers:
  mistral:
    base_url: http://localhost:9000/v1
""".strip(),
        encoding="utf-8",
    )

    cfg = load_app_config(defaults_path=defaults, instance_path=instance)
    assert cfg.runtime.request_timeout_seconds == 5
    assert cfg.runtime.discovery_retry_attempts == 2
    assert cfg.providers["mistral"].api_key_env == "MISTRAL_API_KEY"
    assert cfg.providers["mistral"].base_url == "http://localhost:9000/v1"


def test_config_loader_validation_error_is_clear(tmp_path):
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("runtime:\n  discovery_retry_attempts: 0", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid modelscan configuration"):
        load_app_config(defaults_path=defaults)


def test_config_loader_env_overrides(tmp_path, monkeypatch):
    instance = tmp_path / "instance.yaml"
    instance.write_text("runtime:\n  validation_timeout_seconds: 12.5\n", encoding="utf-8")
    monkeypatch.setenv("MODELSCAN_CONFIG_FILE", str(instance))
    monkeypatch.setenv("MODELSCAN_LOG_LEVEL", "DEBUG")

    cfg = load_app_config(defaults_path=tmp_path / "missing.yaml")
    assert cfg.runtime.validation_timeout_seconds == 12.5
    assert cfg.telemetry.log_level == "DEBUG"


def test_non_mapping_config_is_rejected(tmp_path):
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must contain a mapping"):
        load_app_config(defaults_path=defaults)


def test_credentials_come_from_the_environment(tmp_path, monkeypatch):
    instance = tmp_path / "instance.yaml"
    instance.write_text(
        """
providers:
  voyageai:
    api_key_env: VOYAGE_API_KEY
  openai:
    enabled: false
""".strip(),
        encoding="utf-8",
    )
    for var in ("ANTHROPIC_API_KEY", "DEEPSEEK_API_KEY", "MISTRAL_API_KEY", "VOYAGE_API_KEY", "MODELSCAN_CONFIG_FILE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("VOYAGE_API_KEY", "  v-key  ")
    monkeypatch.setenv("MISTRAL_API_KEY", "m-key")
    monkeypatch.setenv("OPENAI_API_KEY", "o-key")

    cfg = load_app_config(defaults_path=tmp_path / "missing.yaml", instance_path=instance)
    assert credential_env_var(cfg, "voyageai") == "VOYAGE_API_KEY"
    assert credential_env_var(cfg, "deepseek") == "DEEPSEEK_API_KEY"
    assert resolve_credential(cfg, "voyageai") == "v-key"
    assert resolve_credential(cfg, "deepseek") is None

    # openai has a key but is disabled
    assert configured_provider_names(cfg, build_default_registry()) == ["mistral", "voyageai"]
