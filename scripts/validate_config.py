#!/usr/bin/env python3
"""Validate PAYE settings files declared in the manifest."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from naijapaye.backend.config.validator import main  # noqa: E402

if __name__ == "__main__":
    raise SystemExit(main())
