"""Pytest configuration for ShareVault tests."""
import os
import sys
import tempfile
from pathlib import Path

# Settings are read at import time, so point them somewhere disposable first
_TMP_DIR = tempfile.mkdtemp(prefix="sharevault-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["USE_MINIO"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-sharevault-suite-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["BOOTSTRAP_ADMIN_USERNAME"] = "admin"
os.environ["BOOTSTRAP_ADMIN_PASSWORD"] = "admin-test-pw"

# Flat layout: make the project root importable
_PROJECT_ROOT = Path(__file__).parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app
from storage import StorageBackend, get_storage

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin-test-pw"


@pytest.fixture
def db():
    """Fresh schema and a session on it."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def blob_store(tmp_path):
    return StorageBackend(upload_dir=str(tmp_path / "uploads"), use_minio=False)


@pytest.fixture
def client(db, blob_store):
    app.dependency_overrides[get_storage] = lambda: blob_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_token(client):
    resp = client.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
