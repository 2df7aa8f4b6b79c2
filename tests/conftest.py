"""Pytest configuration and fixtures."""

import os

# Must be set before config.settings is imported
os.environ["JWT_SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["REPORT_SECTION_DELAY_SECONDS"] = "0"
for name in ("AZURE_OPENAI_API_KEY", "AZURE_OPENAI_ENDPOINT", "AZURE_DEPLOYMENT_NAME", "AZURE_STORAGE_CONNECTION_STRING"):
    os.environ.pop(name, None)

import pytest
from flask_jwt_extended import create_access_token

from app import create_app
from config.settings import Config
from services.registry import ServiceRegistry
from services.workspace_service import create_workspace
from utils.mongodb import set_db

from fakes.fake_clients import FakeChatModel, FakeLLM, FakeStorage
from fakes.fake_db import FakeDatabase


class TestConfig(Config):
    __test__ = False
    TESTING = True
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    REPORT_FANOUT = "serial"
    REPORT_SECTION_DELAY_SECONDS = 0
    SUMMARY_CHUNK_CHARS = 30000


@pytest.fixture(autouse=True)
def fake_db():
    db = FakeDatabase()
    set_db(db)
    yield db
    set_db(None)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def fake_chat_model():
    return FakeChatModel()


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def app(fake_llm, fake_chat_model, fake_storage):
    services = ServiceRegistry(
        {},
        llm=fake_llm,
        summary_model=fake_chat_model,
        storage=fake_storage,
    )
    return create_app(TestConfig, services=services)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user_id():
    return "64b7f0c2a1b2c3d4e5f60718"


@pytest.fixture
def auth_headers(app, user_id):
    with app.app_context():
        token = create_access_token(identity=user_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def workspace(user_id):
    return create_workspace(user_id, "Acme")
