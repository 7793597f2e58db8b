import pytest
from fastapi.testclient import TestClient

from flashcoach import config
from flashcoach.main import app
from flashcoach.services.history import FlashcardHistory, get_history


@pytest.fixture
def history(tmp_path):
    return FlashcardHistory(tmp_path / "sets.json", capacity=20)


@pytest.fixture
def api_keys(monkeypatch):
    monkeypatch.setattr(config, "OPENROUTER_API_KEY", "test-openrouter-key")
    monkeypatch.setattr(config, "OPENAI_API_KEY", "test-openai-key")


@pytest.fixture
def client(history):
    app.dependency_overrides[get_history] = lambda: history
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
