import asyncio

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.main import app
from app.models.user import UserRole
from app.storage.memory import MemoryStorage
from app.storage.provider import StorageProvider

ADMIN_PHONE = "+15550000001"
ADMIN_PASSWORD = "AdminPass1"
CLIENT_PHONE = "+15550000002"
CLIENT_PASSWORD = "client-pass"
OTHER_PHONE = "+15550000003"

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


def pdf_upload(name="report.pdf", content=PDF_BYTES, content_type="application/pdf"):
    return (name, content, content_type)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def users(storage):
    async def seed():
        admin = await storage.create_user(ADMIN_PHONE, ADMIN_PASSWORD, UserRole.ADMIN, name="Admin")
        client = await storage.create_user(CLIENT_PHONE, CLIENT_PASSWORD, UserRole.CLIENT, name="Alice")
        return {"admin": admin, "client": client}

    return asyncio.run(seed())


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    directory = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_TMP_DIR", directory)
    return directory


@pytest.fixture
def client(storage, users, upload_dir):
    original = app.state.storage_provider
    app.state.storage_provider = StorageProvider(settings, backend=storage)

    with TestClient(app) as test_client:
        yield test_client

    app.state.storage_provider = original


def login(test_client, phone_number, password):
    response = test_client.post(
        "/api/auth/login",
        json={"phoneNumber": phone_number, "password": password},
    )
    assert response.status_code == 200, response.text
    return response.json()["user"]


@pytest.fixture
def admin_client(client):
    login(client, ADMIN_PHONE, ADMIN_PASSWORD)
    return client


@pytest.fixture
def client_session(client):
    login(client, CLIENT_PHONE, CLIENT_PASSWORD)
    return client
