"""Shared fixtures.

The application reads its settings at import time, so the environment is
pointed at a throw-away SQLite file and image directory before anything from
``surveyhub`` is imported. Every test starts from freshly created tables.
"""
import base64
import os
import pathlib
import tempfile

import pytest

_TMP_ROOT = pathlib.Path(tempfile.mkdtemp(prefix="surveyhub-tests-"))
_DB_FILE = _TMP_ROOT / "tests.db"

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_FILE}"
os.environ["PUBLIC_DIR"] = str(_TMP_ROOT / "public")
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["SURVEYS_PER_PAGE"] = "2"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402

from surveyhub import models  # noqa: E402,F401
from surveyhub.auth import get_password_hash  # noqa: E402
from surveyhub.crud import crud_user  # noqa: E402
from surveyhub.database import AsyncSessionFactory, Base  # noqa: E402
from surveyhub.image_storage import LocalImageStorage, get_image_storage  # noqa: E402
from surveyhub.main import app  # noqa: E402

PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(
    b"\x89PNG\r\n\x1a\nnot-really-a-png"
).decode()


@pytest.fixture(autouse=True)
def fresh_schema():
    sync_engine = create_engine(f"sqlite:///{_DB_FILE}")
    Base.metadata.drop_all(sync_engine)
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    yield


@pytest.fixture
async def db():
    async with AsyncSessionFactory() as session:
        yield session


@pytest.fixture
def storage(tmp_path):
    return LocalImageStorage(tmp_path)


async def _make_user(db, name, email):
    user = await crud_user.create_user(
        db, name=name, email=email, hashed_password=get_password_hash("secret123")
    )
    await db.commit()
    return user


@pytest.fixture
async def owner(db):
    return await _make_user(db, "Owner", "owner@example.com")


@pytest.fixture
async def stranger(db):
    return await _make_user(db, "Stranger", "stranger@example.com")


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_image_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def signup(client, name="Alice", email="alice@example.com"):
    response = client.post(
        "/api/signup",
        json={"name": name, "email": email, "password": "secret123"},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth_headers(client):
    return signup(client)


def survey_payload(**overrides):
    payload = {
        "title": "Customer Feedback",
        "description": "How did we do?",
        "expire_date": "2099-01-01",
        "status": True,
        "questions": [
            {
                "id": "7f1c2b9e-temp",
                "question": "Your name",
                "type": "text",
                "description": None,
                "data": {},
            },
            {
                "id": "0b6e1c44-temp",
                "question": "Favourite colour",
                "type": "select",
                "description": "Pick one",
                "data": {"options": [{"uuid": "a", "text": "Red"}, {"uuid": "b", "text": "Blue"}]},
            },
        ],
    }
    payload.update(overrides)
    return payload
