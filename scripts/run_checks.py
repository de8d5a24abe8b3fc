#!/usr/bin/env python3
"""Run ruff, pyright and (optionally) the tests; exit non-zero on the first failure."""

from __future__ import annotations

import argparse
import os
import subprocess
import sys


def run(cmd: list[str], env: dict[str, str] | None = None) -> int:
    print("=>", " ".join(cmd))
    return subprocess.run(cmd, check=False, env=env).returncode


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--no-tests", action="store_true", help="Skip running pytest")
    parser.add_argument("--fix", action="store_true", help="Let ruff apply fixes")
    args = parser.parse_args()

    ruff = [sys.executable, "-m", "ruff", "check", "image_display", "tests", "scripts"]
    if args.fix:
        ruff.append("--fix")
    steps: list[tuple[str, list[str]]] = [
        ("ruff", ruff),
        ("pyright", [sys.executable, "-m", "pyright"] if sys.platform != "win32" else ["pyright"]),
    ]
    for name, cmd in steps:
        if run(cmd) != 0:
            print(f"{name} failed")
            return 1

    if not args.no_tests:
        env = os.environ.copy()
        env.setdefault("QT_QPA_PLATFORM", "offscreen")
        if run([sys.executable, "-m", "pytest", "-q"], env=env) != 0:
            print("pytest failed")
            return 1

    print("All checks passed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
