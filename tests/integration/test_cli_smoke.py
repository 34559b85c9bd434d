from __future__ import annotations

import subprocess
import sys


def _run(args: list[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(args, capture_output=True, text=True, check=False)


def test_cli_help_smoke():
    proc = _run([sys.executable, "-m", "modelscan.apps.scan_cli", "--help"])
    assert proc.returncode == 0, proc.stderr
    assert "--list-providers" in proc.stdout
    assert "--test-model" in proc.stdout
