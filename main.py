#!/usr/bin/env python3
"""Run the backlog dependency-order check from a source checkout."""

# ruff: noqa: E402

from __future__ import annotations

from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from backlog_order.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
