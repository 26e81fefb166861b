import pytest
from fastapi.testclient import TestClient

from psychocalc.core.config import settings
from psychocalc.core.metrics import metrics_registry, set_instrumentation_enabled
from psychocalc.main import app
from psychocalc.services.workspaces import workspace_registry


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    # A developer .env with a real key must not make tests call the network.
    monkeypatch.setattr(settings, "gemini_api_key", None)
    monkeypatch.setattr(settings, "locale", "es")
    yield


@pytest.fixture(autouse=True)
def _reset_state():
    metrics_registry.reset()
    set_instrumentation_enabled(True)
    workspace_registry.clear()
    yield
    metrics_registry.reset()
    workspace_registry.clear()


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client
