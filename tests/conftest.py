import pytest
from fastapi.testclient import TestClient

from syllabuild.core.config import Settings
from syllabuild.main import create_app
from syllabuild.services.model_client import get_model_client
from tests.fakes import FakeModelClient


@pytest.fixture
def settings():
    return Settings(openai_api_key="test-key", _env_file=None)


@pytest.fixture
def fake_model():
    return FakeModelClient()


@pytest.fixture
def app(fake_model):
    application = create_app(Settings(_env_file=None))
    application.dependency_overrides[get_model_client] = lambda: fake_model
    return application


@pytest.fixture
def api_client(app):
    return TestClient(app)
