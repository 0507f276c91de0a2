"""Shared fixtures: isolated data dir, fresh tables per test, fake Cloudinary."""

import itertools
import os
import tempfile

# Settings are read at import time, so point them at a scratch dir first.
os.environ["SCRAPBOOK_DATA_DIR"] = tempfile.mkdtemp()
os.environ["SCRAPBOOK_ENVIRONMENT"] = "test"

import cloudinary.uploader  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session  # noqa: E402

from scrapbook.database import engine, reset_db  # noqa: E402
from scrapbook.main import app  # noqa: E402


class FakeCloudinary:
    """Records uploads/deletes and returns provider-shaped results."""

    def __init__(self):
        self.uploads = []
        self.destroyed = []
        self._ids = itertools.count(1)

    def upload(self, file, folder="", resource_type="image", **kwargs):
        n = next(self._ids)
        ext = "mp4" if resource_type == "video" else "jpg"
        public_id = f"{folder}/asset{n}"
        self.uploads.append({"folder": folder, "resource_type": resource_type, "public_id": public_id})
        return {
            "secure_url": f"https://res.cloudinary.com/demo/{resource_type}/upload/v1/{public_id}.{ext}",
            "public_id": public_id,
            "width": 640,
            "height": 480,
            "bytes": len(file.getvalue()),
            "format": ext,
        }

    def destroy(self, public_id, resource_type="image", **kwargs):
        self.destroyed.append(public_id)
        return {"result": "ok"}


@pytest.fixture
def cdn(monkeypatch):
    fake = FakeCloudinary()
    monkeypatch.setattr(cloudinary.uploader, "upload", fake.upload)
    monkeypatch.setattr(cloudinary.uploader, "destroy", fake.destroy)
    return fake


@pytest.fixture
def client(cdn):
    reset_db()
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session():
    reset_db()
    with Session(engine) as s:
        yield s


@pytest.fixture
def make_user(client):
    """Register a user; returns (user dict, auth headers)."""
    counter = itertools.count(1)

    def _make(name=None, email=None, password="secret123"):
        n = next(counter)
        name = name or f"User {n}"
        email = email or f"user{n}@example.com"
        r = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert r.status_code == 201, r.text
        body = r.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _make


@pytest.fixture
def make_event(client):
    """Create an event as the given user; extra keyword args go into the body."""

    def _make(headers, name="Reunion", **fields):
        r = client.post("/api/events", json={"name": name, **fields}, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()

    return _make


@pytest.fixture
def upload(client):
    """Upload a small file to an event."""

    def _upload(headers, event_id, content=b"\xff\xd8fake-jpeg", content_type="image/jpeg",
                filename="photo.jpg", description=None, path="/api/media/upload"):
        data = {"eventId": event_id}
        if description is not None:
            data["description"] = description
        return client.post(
            path,
            files={"file": (filename, content, content_type)},
            data=data,
            headers=headers,
        )

    return _upload
