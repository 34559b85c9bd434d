from __future__ import annotations

import json

import httpx
import pytest

from modelscan.apps import scan_cli
from modelscan.core.providers.catalog import registry_from_config

_KEY_VARS = (
    "ANTHROPIC_API_KEY",
    "DEEPSEEK_API_KEY",
    "MISTRAL_API_KEY",
    "OPENAI_API_KEY",
    "VOYAGE_API_KEY",
    "VOYAGEAI_API_KEY",
    "MODELSCAN_CONFIG_FILE",
    "MODELSCAN_LOG_LEVEL",
)


def _handler(status: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        if status != 200:
            return httpx.Response(status, text="upstream error")
        if request.url.path.endswith("/models"):
            return httpx.Response(200, json={"data": [{"id": "mistral-small-latest"}, {"id": "codestral-latest"}]})
        return httpx.Response(200, json={"id": "cmpl-1", "choices": []})

    return handler


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    for var in _KEY_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    config = tmp_path / "instance.yaml"
    config.write_text(
        """
telemetry:
  log_level: WARNING
  json_logs: true
providers:
  mistral:
    api_key_env: MISTRAL_API_KEY
    base_url: http://mistral.test/v1
""".strip(),
        encoding="utf-8",
    )

    def use_transport(status: int = 200):
        transport = httpx.MockTransport(_handler(status))
        monkeypatch.setattr(
            "modelscan.apps.scan_cli.registry_from_config",
            lambda cfg: registry_from_config(cfg, transport=transport),
        )

    use_transport()
    return config, use_transport


def test_list_providers_output(cli_env, monkeypatch, capsys):
    config, _ = cli_env
    monkeypatch.setenv("MISTRAL_API_KEY", "m-key")

    rc = scan_cli.main(["--config", str(config), "--list-providers"])
    out = capsys.readouterr().out
    assert rc == 0
    assert "providers:" in out
    assert "- mistral: configured=True" in out
    assert "- openai: configured=False" in out


def test_scan_prints_json_report(cli_env, monkeypatch, capsys):
    config, _ = cli_env
    monkeypatch.setenv("MISTRAL_API_KEY", "m-key")

    rc = scan_cli.main(["--config", str(config), "--format", "json"])
    out = capsys.readouterr().out
    assert rc == 0

    (report,) = json.loads(out)
    assert report["provider"] == "mistral"
    assert report["ok"] is True
    assert report["model_count"] == 2
    assert {ep["status"] for ep in report["endpoints"]} == {"working"}


def test_scan_failure_sets_exit_code(cli_env, monkeypatch, capsys):
    config, use_transport = cli_env
    monkeypatch.setenv("MISTRAL_API_KEY", "m-key")
    use_transport(500)

    rc = scan_cli.main(["--config", str(config), "--provider", "mistral", "--skip-models"])
    out = capsys.readouterr().out
    assert rc == 1
    assert "== mistral: ok=False endpoints=0/7" in out
    assert "all endpoints failed" in out


def test_scan_writes_markdown_report(cli_env, monkeypatch, capsys, tmp_path):
    config, _ = cli_env
    monkeypatch.setenv("MISTRAL_API_KEY", "m-key")
    target = tmp_path / "reports" / "scan.md"

    rc = scan_cli.main(["--config", str(config), "--format", "markdown", "--output", str(target)])
    out = capsys.readouterr().out
    assert rc == 0
    assert f"report-written path={target}" in out
    content = target.read_text(encoding="utf-8")
    assert content.startswith("# Provider Validation Report")
    assert "`codestral-latest`" in content


def test_verbose_progress_goes_to_stderr(cli_env, monkeypatch, capsys):
    config, _ = cli_env
    monkeypatch.setenv("MISTRAL_API_KEY", "m-key")

    rc = scan_cli.main(["--config", str(config), "--verbose", "--skip-models", "--format", "json"])
    captured = capsys.readouterr()
    assert rc == 0
    assert "Testing endpoint: POST /chat/completions" in captured.err
    assert "Testing endpoint" not in captured.out


def test_model_test_reports_result(cli_env, monkeypatch, capsys):
    config, use_transport = cli_env
    monkeypatch.setenv("MISTRAL_API_KEY", "m-key")

    rc = scan_cli.main(["--config", str(config), "--provider", "mistral", "--test-model", "mistral-small-latest"])
    assert rc == 0
    assert "model-test provider=mistral model=mistral-small-latest ok=True" in capsys.readouterr().out

    use_transport(404)
    rc = scan_cli.main(["--config", str(config), "--provider", "mistral", "--test-model", "nope"])
    out = capsys.readouterr().out
    assert rc == 1
    assert "ok=False error=RemoteError: HTTP 404" in out


def test_model_test_requires_one_provider(cli_env, capsys):
    config, _ = cli_env
    with pytest.raises(SystemExit) as excinfo:
        scan_cli.main(["--config", str(config), "--test-model", "x"])
    assert excinfo.value.code == 2


def test_no_configured_providers(cli_env, capsys):
    config, _ = cli_env
    rc = scan_cli.main(["--config", str(config)])
    assert rc == 1
    assert "no providers configured" in capsys.readouterr().out


def test_invalid_config_is_reported(tmp_path, capsys):
    config = tmp_path / "bad.yaml"
    config.write_text("runtime:\n  discovery_retry_attempts: zero\n", encoding="utf-8")
    rc = scan_cli.main(["--config", str(config)])
    assert rc == 1
    assert "config-invalid" in capsys.readouterr().out
