import pytest
from fastapi.testclient import TestClient

from aquarium_health.core.config import Settings, get_settings, get_thresholds
from aquarium_health.main import app
from aquarium_health.schemas import AnalysisThresholds


@pytest.fixture
def settings():
    # ignore any .env on the developer machine
    return Settings(_env_file=None)


@pytest.fixture
def client(settings):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_thresholds] = lambda: AnalysisThresholds()
    yield TestClient(app)
    app.dependency_overrides.clear()
