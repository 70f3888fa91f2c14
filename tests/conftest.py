"""
Shared fixtures: the board app running in replay mode against the example snapshot.
"""

import pytest
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi.testclient import TestClient

import backend.main as main
from ingestion.snapshot_source import ReplaySource


EXAMPLE_PATH = Path(__file__).parent.parent / "contracts" / "examples" / "vatsim_snapshot.json"


@pytest.fixture
def make_client(monkeypatch, tmp_path):
    """Factory for a started TestClient; ``source`` overrides the replay source."""
    def factory(source=None, rotate_interval=0.05):
        monkeypatch.setattr(
            main, "create_snapshot_source", lambda: source or ReplaySource(str(EXAMPLE_PATH))
        )
        monkeypatch.setattr(main, "THEME_FILE", str(tmp_path / "theme.json"))
        monkeypatch.setattr(main, "SEARCH_DEBOUNCE_SECONDS", 0.01)
        monkeypatch.setattr(main, "ROTATE_INTERVAL", rotate_interval)
        return TestClient(main.app)

    return factory


@pytest.fixture
def client(make_client):
    with make_client() as c:
        yield c
