from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from modelscan.cli import base_parser
from modelscan.core.config.loader import load_app_config, resolve_credential
from modelscan.core.config.schema import AppConfig
from modelscan.core.providers.catalog import registry_from_config
from modelscan.core.providers.health import scan_configured_providers
from modelscan.core.providers.registry import ProviderRegistry
from modelscan.core.reporting.export import FORMATS, render
from modelscan.core.runtime.errors import ProviderError, compact_error_summary
from modelscan.core.telemetry.logging import configure_logging


async def _test_model(cfg: AppConfig, registry: ProviderRegistry, name: str, model_id: str, verbose: bool) -> int:
    credential = resolve_credential(cfg, name)
    if not credential:
        print(f"model-test provider={name} model={model_id} ok=False error=missing api key in env")
        return 1
    async with registry.create(name, credential) as provider:
        try:
            await provider.test_model(model_id, verbose=verbose)
        except ProviderError as exc:
            print(f"model-test provider={name} model={model_id} ok=False error={compact_error_summary(exc)}")
            return 1
    print(f"model-test provider={name} model={model_id} ok=True")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = base_parser("modelscan", "Validate provider endpoints and discover models")
    parser.add_argument(
        "--provider",
        action="append",
        default=None,
        help="Provider to scan; repeatable. Defaults to every provider with a credential.",
    )
    parser.add_argument("--list-providers", action="store_true")
    parser.add_argument("--format", choices=FORMATS, default="text")
    parser.add_argument("--output", default=None, help="Write the report to this file instead of stdout")
    parser.add_argument("--timeout", type=float, default=None, help="Deadline in seconds for one validation pass")
    parser.add_argument("--skip-models", action="store_true")
    parser.add_argument("--test-model", default=None, metavar="MODEL_ID")
    args = parser.parse_args(argv)

    try:
        cfg = load_app_config(instance_path=args.config)
    except ValueError as exc:
        print(f"config-invalid error={exc}")
        return 1
    configure_logging(cfg.telemetry.log_level, cfg.telemetry.json_logs)
    registry = registry_from_config(cfg)

    if args.list_providers:
        print("providers:")
        for name in registry.list_providers():
            print(f"- {name}: configured={resolve_credential(cfg, name) is not None}")
        return 0

    names = [n for n in (args.provider or []) if n != "all"] or None

    if args.test_model:
        if not names or len(names) != 1:
            parser.error("--test-model requires exactly one --provider")
        if names[0] not in registry:
            print(f"unknown provider: {names[0]}")
            return 1
        return asyncio.run(_test_model(cfg, registry, names[0], args.test_model, args.verbose))

    timeout = args.timeout if args.timeout is not None else cfg.runtime.validation_timeout_seconds
    results = asyncio.run(
        scan_configured_providers(
            cfg,
            registry,
            names,
            verbose=args.verbose,
            timeout_seconds=timeout,
            skip_models=args.skip_models,
            stream=sys.stderr,
        )
    )
    if not results:
        print("no providers configured (set <PROVIDER>_API_KEY or pass --provider)")
        return 1

    report = render(results.values(), args.format)
    if args.output:
        path = Path(args.output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(report, encoding="utf-8")
        print(f"report-written path={path}")
    else:
        print(report)
    return 0 if all(r.ok for r in results.values()) else 1


if __name__ == "__main__":
    raise SystemExit(main())
