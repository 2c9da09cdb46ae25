#!/usr/bin/env python3
"""
Run the nameid checks locally in the ACTIVE virtual environment.

Steps:
  1) uv sync --active --extra dev (skipped with --no-sync)
  2) black --check on nameid/, tests/ and scripts/
  3) mypy on nameid/
  4) pytest tests/ with coverage of nameid
"""

import argparse
import os
import shutil
import subprocess
import sys
from pathlib import Path

REPO = Path(__file__).resolve().parent.parent
LINT_TARGETS = ["nameid", "tests", "scripts"]


def tool(*args: str) -> list[str]:
    """Prefer running through uv when it is installed, otherwise the current interpreter."""
    uv_path = shutil.which("uv")
    if uv_path:
        return [uv_path, "run", "--active", *args]
    return [sys.executable, "-m", *args]


def run(cmd: list[str], *, env: dict[str, str] | None = None) -> None:
    print(">>>", " ".join(cmd))
    subprocess.run(cmd, check=True, cwd=str(REPO), env=env)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run formatting, typing and test checks.")
    parser.add_argument("--no-sync", action="store_true", help="Do not sync dependencies first.")
    parser.add_argument("--cov-fail-under", type=int, default=80, help="Minimum coverage percentage.")
    args = parser.parse_args()

    if not args.no_sync:
        uv_path = shutil.which("uv")
        if uv_path is None:
            print("ERROR: 'uv' not found. Install uv or pass --no-sync.", file=sys.stderr)
            sys.exit(2)
        run([uv_path, "sync", "--active", "--extra", "dev"])

    run(tool("black", *LINT_TARGETS, "--check", "--line-length", "120"))
    run(tool("mypy", "nameid", "--ignore-missing-imports"))

    env = os.environ.copy()
    env["PYTHONPATH"] = str(REPO)
    run(
        tool(
            "pytest",
            "tests/",
            "--cov=nameid",
            "--cov-report=term-missing",
            f"--cov-fail-under={args.cov_fail_under}",
        ),
        env=env,
    )

    print("\nALL CHECKS PASSED")


if __name__ == "__main__":
    try:
        main()
    except subprocess.CalledProcessError as e:
        print(f"\nCommand failed with exit code {e.returncode}", file=sys.stderr)
        sys.exit(e.returncode)
