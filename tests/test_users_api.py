import base64
import logging

from redis.exceptions import TimeoutError as RedisTimeoutError
from sqlalchemy.exc import OperationalError

from app.services.sessions import SessionStore


def test_register_login_me_logout(client, auth_headers):
    headers = auth_headers("bob@dylan.com", "toto1234!")

    me = client.get("/users/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["email"] == "bob@dylan.com"
    assert set(me.json()) == {"id", "email"}

    logout = client.post("/auth/logout", headers=headers)
    assert logout.status_code == 204
    assert client.get("/disconnect", headers=headers).status_code == 204

    after = client.get("/users/me", headers=headers)
    assert after.status_code == 401
    assert after.json() == {"error": "Unauthorized"}


def test_register_validation_and_conflict(client):
    missing_email = client.post("/users", json={"password": "secret123"})
    assert missing_email.status_code == 400
    assert missing_email.json() == {"error": "Missing email"}

    missing_password = client.post("/users", json={"email": "a@example.com"})
    assert missing_password.status_code == 400
    assert missing_password.json() == {"error": "Missing password"}

    first = client.post("/users", json={"email": "a@example.com", "password": "secret123"})
    assert first.status_code == 201
    duplicate = client.post("/users", json={"email": "A@example.com", "password": "other-secret"})
    assert duplicate.status_code == 400
    assert duplicate.json() == {"error": "Already exist"}


def test_registration_sends_welcome_job(client, caplog):
    caplog.set_level(logging.INFO, logger="app.workers.tasks")

    response = client.post("/users", json={"email": "new@example.com", "password": "secret123"})

    assert response.status_code == 201
    assert "Welcome new@example.com!" in caplog.text


def test_login_rejects_bad_password(client):
    client.post("/users", json={"email": "a@example.com", "password": "secret123"})

    response = client.post("/auth/login", json={"email": "a@example.com", "password": "wrong"})

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_connect_with_basic_auth(client):
    client.post("/users", json={"email": "a@example.com", "password": "secret123"})
    credentials = base64.b64encode(b"a@example.com:secret123").decode("ascii")

    response = client.get("/connect", headers={"Authorization": f"Basic {credentials}"})

    assert response.status_code == 200
    token = response.json()["token"]
    assert client.get("/users/me", headers={"X-Token": token}).status_code == 200
    assert client.get("/connect").status_code == 401


def test_dangling_session_is_unauthorized(client, fake_redis):
    token = SessionStore(fake_redis, ttl_seconds=60).create("deleted-user-id")

    response = client.get("/users/me", headers={"X-Token": token})

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_status_and_stats(client, auth_headers):
    headers = auth_headers()
    client.post("/files", headers=headers, json={"name": "docs", "type": "folder"})

    assert client.get("/status").json() == {"redis": True, "db": True}
    assert client.get("/stats").json() == {"users": 1, "files": 1}


def test_session_store_outage_is_storage_unavailable(client, fake_redis, monkeypatch):
    token = SessionStore(fake_redis, ttl_seconds=60).create("some-user")

    def _timeout(*args, **kwargs):
        raise RedisTimeoutError("read timed out")

    monkeypatch.setattr(fake_redis, "get", _timeout)
    response = client.get("/users/me", headers={"X-Token": token})

    assert response.status_code == 503
    assert response.json() == {"error": "Storage unavailable"}


def test_database_outage_is_storage_unavailable(client, auth_headers, monkeypatch):
    headers = auth_headers()

    def _locked(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr("app.routers.deps.get_user", _locked)
    response = client.get("/users/me", headers=headers)

    assert response.status_code == 503
    assert response.json() == {"error": "Storage unavailable"}
