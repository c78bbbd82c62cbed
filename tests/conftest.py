from __future__ import annotations

import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = BASE_DIR / "src"
TESTS_DIR = BASE_DIR / "tests"

for path in (SRC_DIR, TESTS_DIR):
    sys.path.insert(0, str(path))
