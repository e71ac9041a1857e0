import os
import tempfile

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="formbuilder-logs-")
os.environ["EMAIL_ENABLED"] = "false"
os.environ.pop("REDIS_URL", None)

import pytest
from fastapi.testclient import TestClient

from formbuilder.db.base import Base
from formbuilder.db.session import engine, SessionLocal
from formbuilder.main import app
from formbuilder.services.email import get_notifier
from tests.helpers import SHORT_ANSWER, RecordingNotifier


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(notifier):
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def create_form(client):
    def _create(fields=None, title="Feedback", **extra):
        body = {"title": title, "fields": fields or [SHORT_ANSWER], **extra}
        response = client.post("/api/forms", json=body)
        assert response.status_code == 201, response.text
        return response.json()["formId"]
    return _create


@pytest.fixture
def publish(client):
    def _publish(form_id, emails):
        response = client.post(f"/api/forms/{form_id}/publish", json={"emails": emails})
        assert response.status_code == 200, response.text
        return response.json()
    return _publish
