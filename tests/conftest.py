from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Keep the rotating log file out of the user's home directory during tests.
os.environ.setdefault("SHEETFLOW_LOG_DIR", tempfile.mkdtemp(prefix="sheetflow-logs-"))


@pytest.fixture
def people() -> List[Dict[str, Any]]:
    return [
        {"id": 1, "name": "Ada", "status": 1, "amount": 12.5, "created_at": "2024-03-05 10:30:00"},
        {"id": 2, "name": "Linus", "status": 0, "amount": "7", "created_at": "2024-03-06"},
        {"id": 3, "name": "Grace", "status": 2, "amount": None, "created_at": "0000-00-00"},
    ]
