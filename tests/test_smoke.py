from __future__ import annotations

import sys
from pathlib import Path

from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from dutch_deck import storage  # noqa: E402  (import after sys.path update)
from dutch_deck.app import app  # noqa: E402


def test_root_route_returns_success(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(storage, "DB_PATH", tmp_path / "smoke.db")
    client = TestClient(app)

    response = client.get("/")

    assert response.status_code == 200
    assert "Dutch Deck" in response.text
    assert "0</strong> cards due of 0" in response.text
