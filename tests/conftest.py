import os
import tempfile
from pathlib import Path

import fakeredis
import pytest
from fastapi.testclient import TestClient

os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["FOLDER_PATH"] = tempfile.mkdtemp(prefix="files_manager_test_")
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["STORE_CONNECT_ATTEMPTS"] = "1"

from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.main import create_app
from app.services.sessions import SessionStore
from app.services.storage import get_blob_store


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    client = fakeredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr("app.db.redis._client", client)
    return client


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    path = Path("test.db")
    if path.exists():
        path.unlink()


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def blobs():
    return get_blob_store()


@pytest.fixture()
def sessions(fake_redis):
    return SessionStore(fake_redis, ttl_seconds=60)


@pytest.fixture()
def client():
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def auth_headers(client):
    def _auth_headers(email: str = "user@example.com", password: str = "secret123") -> dict:
        register = client.post("/users", json={"email": email, "password": password})
        assert register.status_code == 201, register.text
        login = client.post("/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        return {"X-Token": login.json()["token"]}

    return _auth_headers

