from __future__ import annotations

import json
from collections.abc import Iterable

from modelscan.core.providers.health import ProviderScanResult

FORMATS = ("text", "markdown", "json")


def _latency(value: float | None) -> str:
    return f"{value:.1f}ms" if value is not None else "-"


def render_text(results: Iterable[ProviderScanResult]) -> str:
    lines: list[str] = []
    for result in results:
        lines.append(
            f"== {result.provider}: ok={result.ok} endpoints={result.working_endpoints}/{len(result.endpoints)} "
            f"models={result.model_count}"
        )
        for ep in result.endpoints:
            suffix = f" error={ep.error}" if ep.error else ""
            lines.append(f"- {ep.method} {ep.path}: {ep.status} latency={_latency(ep.latency_ms)}{suffix}")
        if result.error:
            lines.append(f"error: {result.error}")
    return "\n".join(lines)


def _cell(value: object) -> str:
    return str(value).replace("|", "\\|").replace("\n", " ")


def render_markdown(results: Iterable[ProviderScanResult]) -> str:
    results = list(results)
    out = ["# Provider Validation Report", ""]
    out.append("| Provider | OK | Working endpoints | Models | Error |")
    out.append("|---|---|---|---|---|")
    for r in results:
        out.append(
            f"| {r.provider} | {'yes' if r.ok else 'no'} | {r.working_endpoints}/{len(r.endpoints)} "
            f"| {r.model_count} | {_cell(r.error or '')} |"
        )

    for r in results:
        out.extend(["", f"## {r.provider}", ""])
        if r.endpoints:
            out.append("| Method | Path | Status | Latency | Error |")
            out.append("|---|---|---|---|---|")
            for ep in r.endpoints:
                out.append(
                    f"| {ep.method} | `{ep.path}` | {ep.status} | {_latency(ep.latency_ms)} | {_cell(ep.error or '')} |"
                )
        if r.models:
            out.extend(["", "| Model | Name | $/1M in | $/1M out | Context | Categories |", "|---|---|---|---|---|---|"])
            for m in r.models:
                out.append(
                    f"| `{m['id']}` | {_cell(m['name'])} | {m['cost_per_million_input']:.2f} "
                    f"| {m['cost_per_million_output']:.2f} | {m['context_window']} | {', '.join(m['categories'])} |"
                )
    return "\n".join(out) + "\n"


def render_json(results: Iterable[ProviderScanResult]) -> str:
    return json.dumps([r.model_dump(mode="json") for r in results], indent=2)


def render(results: Iterable[ProviderScanResult], fmt: str) -> str:
    if fmt == "markdown":
        return render_markdown(results)
    if fmt == "json":
        return render_json(results)
    if fmt == "text":
        return render_text(results)
    raise ValueError(f"unknown report format: {fmt}")
