from __future__ import annotations

import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from helpdesk_client.core import config  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_local_storage(monkeypatch, tmp_path):
    """Point the default local storage file into the test's tmp dir."""
    path = tmp_path / "storage.json"
    monkeypatch.setattr(config.settings, "LOCAL_STORAGE_PATH", str(path))
    return path
