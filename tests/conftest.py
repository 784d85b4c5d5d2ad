"""Shared fixtures: a throwaway SQLite database and an authenticated client."""

import os
import tempfile

# Settings are read at import time, so the environment must be ready first
_TMP_DIR = tempfile.mkdtemp(prefix="filemanager-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_LEEWAY_SECONDS"] = "0"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "60"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["MAX_FILE_SIZE"] = str(5 * 1024 * 1024)
os.environ["API_PREFIX"] = "/api/v1"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from filemanager.db.session import SessionLocal
from filemanager.main import app
from filemanager.models.file import File
from filemanager.models.user import User

AUTH_URL = "/api/v1/auth"
FILES_URL = "/api/v1/file/manager"


@pytest.fixture
def client():
    """FastAPI test client with startup/shutdown run; tables emptied afterwards."""
    with TestClient(app) as test_client:
        yield test_client

    db = SessionLocal()
    try:
        db.query(File).delete()
        db.query(User).delete()
        db.commit()
    finally:
        db.close()


@pytest.fixture
def user_payload():
    return {
        "firstName": "Ann",
        "lastName": "Lee",
        "email": "a@b.com",
        "username": "ann",
        "password": "Abcdefgh",
    }


@pytest.fixture
def registered_user(client, user_payload):
    response = client.post(f"{AUTH_URL}/register", json=user_payload)
    assert response.status_code == 201
    return response.json()["data"]


@pytest.fixture
def token(client, registered_user, user_payload):
    response = client.post(f"{AUTH_URL}/login", json={
        "email": user_payload["email"],
        "password": user_payload["password"],
    })
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def upload(client, auth_headers):
    """Upload helper returning the created file metadata."""
    def _upload(name="hello.txt", content=b"hello world", mimetype="text/plain"):
        response = client.post(
            f"{FILES_URL}/",
            files={"file": (name, content, mimetype)},
            headers=auth_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _upload
