from app.core.config import settings
from app.core.exceptions import StorageError
from tests.conftest import (
    CLIENT_PASSWORD,
    CLIENT_PHONE,
    OTHER_PHONE,
    PDF_BYTES,
    login,
    pdf_upload,
)


def upload(test_client, phone=CLIENT_PHONE, file=None):
    return test_client.post(
        "/api/documents/upload",
        files={"file": file or pdf_upload()},
        data={"clientPhoneNumber": phone},
    )


def switch_to_client(test_client):
    test_client.post("/api/auth/logout")
    login(test_client, CLIENT_PHONE, CLIENT_PASSWORD)


# =============================================================================
# UPLOAD
# =============================================================================

def test_admin_uploads_pdf(admin_client, users, upload_dir):
    response = upload(admin_client, phone="+1 (555) 000-0002")
    assert response.status_code == 200

    document = response.json()["document"]
    assert document["fileName"] == "report.pdf"
    assert document["clientPhoneNumber"] == CLIENT_PHONE
    assert document["fileSize"] == len(PDF_BYTES)
    assert document["contentType"] == "application/pdf"
    assert document["uploadedBy"] == users["admin"].id
    assert list(upload_dir.glob("*")) == []


def test_non_pdf_is_rejected_and_not_stored(admin_client, upload_dir):
    response = upload(admin_client, file=("photo.png", b"\x89PNG\r\n", "image/png"))
    assert response.status_code == 400
    assert response.json()["error"] == "Only PDF files are allowed"

    assert admin_client.get("/api/documents").json()["documents"] == []
    assert list(upload_dir.glob("*")) == []


def test_pdf_named_file_with_wrong_bytes_is_rejected(admin_client, upload_dir):
    response = upload(admin_client, file=("fake.pdf", b"MZ not really a pdf", "application/pdf"))
    assert response.status_code == 400
    assert admin_client.get("/api/documents").json()["documents"] == []
    assert list(upload_dir.glob("*")) == []


def test_empty_file_is_rejected(admin_client):
    response = upload(admin_client, file=("empty.pdf", b"", "application/pdf"))
    assert response.status_code == 400
    assert response.json()["error"] == "Uploaded file is empty"


def test_oversized_file_is_rejected(admin_client, upload_dir, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 1)
    big = b"%PDF-" + b"0" * (1024 * 1024)

    response = upload(admin_client, file=("big.pdf", big, "application/pdf"))
    assert response.status_code == 413
    assert response.json()["code"] == "UPLOAD_ERROR"
    assert list(upload_dir.glob("*")) == []


def test_upload_requires_valid_client_phone(admin_client):
    missing = admin_client.post("/api/documents/upload", files={"file": pdf_upload()})
    invalid = upload(admin_client, phone="12345")

    assert missing.status_code == 400
    assert missing.json()["error"] == "Client phone number is required"
    assert invalid.status_code == 400
    assert invalid.json()["code"] == "VALIDATION_ERROR"


def test_upload_requires_file(admin_client):
    response = admin_client.post("/api/documents/upload", data={"clientPhoneNumber": CLIENT_PHONE})
    assert response.status_code == 400
    assert response.json()["error"] == "No file uploaded"


def test_clients_cannot_upload(client_session):
    assert upload(client_session).status_code == 403


def test_anonymous_cannot_upload(client):
    assert upload(client).status_code == 401


# =============================================================================
# BATCH UPLOAD
# =============================================================================

def test_batch_upload_reports_each_file(admin_client, upload_dir):
    files = []
    for index in range(1, 6):
        content = b"corrupted bytes" if index == 3 else PDF_BYTES
        files.append(("files", (f"{index}.pdf", content, "application/pdf")))

    response = admin_client.post(
        "/api/documents/batch-upload",
        files=files,
        data={"clientPhoneNumber": CLIENT_PHONE},
    )
    assert response.status_code == 200

    data = response.json()
    assert data["totalFiles"] == 5
    assert data["successCount"] == 4
    assert data["errorCount"] == 1
    assert data["errors"] == [{"fileName": "3.pdf", "error": "Only PDF files are allowed"}]
    assert sorted(d["fileName"] for d in data["documents"]) == ["1.pdf", "2.pdf", "4.pdf", "5.pdf"]
    assert list(upload_dir.glob("*")) == []

    assert len(admin_client.get("/api/documents").json()["documents"]) == 4


def test_batch_continues_past_a_storage_failure(admin_client, storage, upload_dir, monkeypatch):
    original_create = storage.create_document
    calls = {"count": 0}

    async def flaky_create(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 3:
            raise StorageError("gridfs write failed on shard db-2")
        return await original_create(*args, **kwargs)

    monkeypatch.setattr(storage, "create_document", flaky_create)

    response = admin_client.post(
        "/api/documents/batch-upload",
        files=[("files", pdf_upload(f"{index}.pdf")) for index in range(1, 6)],
        data={"clientPhoneNumber": CLIENT_PHONE},
    )
    assert response.status_code == 200

    data = response.json()
    assert data["successCount"] == 4
    assert data["errorCount"] == 1
    assert data["errors"] == [{"fileName": "3.pdf", "error": "Failed to upload document"}]
    assert "db-2" not in response.text
    assert list(upload_dir.glob("*")) == []


def test_batch_continues_past_an_unexpected_failure(admin_client, storage, upload_dir, monkeypatch):
    original_create = storage.create_document
    calls = {"count": 0}

    async def broken_create(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            raise RuntimeError("driver socket closed")
        return await original_create(*args, **kwargs)

    monkeypatch.setattr(storage, "create_document", broken_create)

    response = admin_client.post(
        "/api/documents/batch-upload",
        files=[("files", pdf_upload("a.pdf")), ("files", pdf_upload("b.pdf"))],
        data={"clientPhoneNumber": CLIENT_PHONE},
    )
    data = response.json()
    assert data["successCount"] == 1
    assert data["errors"] == [{"fileName": "a.pdf", "error": "Failed to upload document"}]
    assert "socket" not in response.text
    assert list(upload_dir.glob("*")) == []


def test_batch_without_errors_omits_error_list(admin_client):
    response = admin_client.post(
        "/api/documents/batch-upload",
        files=[("files", pdf_upload("a.pdf")), ("files", pdf_upload("b.pdf"))],
        data={"clientPhoneNumber": CLIENT_PHONE},
    )
    data = response.json()
    assert data["successCount"] == 2
    assert "errors" not in data


def test_batch_requires_files(admin_client):
    response = admin_client.post(
        "/api/documents/batch-upload", data={"clientPhoneNumber": CLIENT_PHONE}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "No files uploaded"


def test_batch_enforces_file_limit(admin_client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_BATCH_FILES", 2)

    response = admin_client.post(
        "/api/documents/batch-upload",
        files=[("files", pdf_upload(f"{i}.pdf")) for i in range(3)],
        data={"clientPhoneNumber": CLIENT_PHONE},
    )
    assert response.status_code == 400
    assert admin_client.get("/api/documents").json()["documents"] == []


# =============================================================================
# LISTING AND ACCESS
# =============================================================================

def test_client_only_sees_own_documents(admin_client):
    own = upload(admin_client, phone=CLIENT_PHONE).json()["document"]
    foreign = upload(admin_client, phone=OTHER_PHONE).json()["document"]

    all_documents = admin_client.get("/api/documents").json()["documents"]
    assert {d["id"] for d in all_documents} == {own["id"], foreign["id"]}

    filtered = admin_client.get("/api/documents", params={"clientPhoneNumber": OTHER_PHONE})
    assert [d["id"] for d in filtered.json()["documents"]] == [foreign["id"]]

    switch_to_client(admin_client)

    listing = admin_client.get("/api/documents").json()["documents"]
    assert [d["id"] for d in listing] == [own["id"]]

    snooping = admin_client.get("/api/documents", params={"clientPhoneNumber": OTHER_PHONE})
    assert snooping.status_code == 403

    assert admin_client.get(f"/api/documents/{foreign['id']}/preview").status_code == 403
    assert admin_client.get(f"/api/documents/{foreign['id']}/download").status_code == 403


def test_listing_is_newest_first(admin_client):
    ids = [upload(admin_client, file=pdf_upload(f"{i}.pdf")).json()["document"]["id"] for i in range(3)]

    listing = admin_client.get("/api/documents").json()["documents"]
    assert [d["id"] for d in listing] == list(reversed(ids))


def test_listing_requires_session(client):
    assert client.get("/api/documents").status_code == 401


def test_preview_and_download_stream_the_pdf(admin_client):
    document = upload(admin_client, file=pdf_upload("tax return.pdf")).json()["document"]

    switch_to_client(admin_client)

    preview = admin_client.get(f"/api/documents/{document['id']}/preview")
    assert preview.status_code == 200
    assert preview.content == PDF_BYTES
    assert preview.headers["content-type"] == "application/pdf"
    assert preview.headers["content-disposition"].startswith("inline;")
    assert "filename*=utf-8''tax%20return.pdf" in preview.headers["content-disposition"]

    download = admin_client.get(f"/api/documents/{document['id']}/download")
    assert download.status_code == 200
    assert download.content == PDF_BYTES
    assert download.headers["content-disposition"].startswith("attachment;")


def test_unknown_document_is_404(admin_client):
    assert admin_client.get("/api/documents/does-not-exist/preview").status_code == 404


# =============================================================================
# DELETE
# =============================================================================

def test_delete_removes_document(admin_client):
    document = upload(admin_client).json()["document"]

    response = admin_client.delete(f"/api/documents/{document['id']}")
    assert response.status_code == 200
    assert response.json() == {"success": True}

    assert admin_client.get("/api/documents").json()["documents"] == []
    assert admin_client.get(f"/api/documents/{document['id']}/preview").status_code == 404
    assert admin_client.delete(f"/api/documents/{document['id']}").status_code == 404


def test_delete_lost_to_a_concurrent_delete_is_404(admin_client, storage, monkeypatch):
    document = upload(admin_client).json()["document"]

    async def already_deleted(document_id):
        return False

    monkeypatch.setattr(storage, "delete_document", already_deleted)

    response = admin_client.delete(f"/api/documents/{document['id']}")
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_clients_cannot_delete(admin_client):
    document = upload(admin_client).json()["document"]
    switch_to_client(admin_client)

    assert admin_client.delete(f"/api/documents/{document['id']}").status_code == 403


# =============================================================================
# ROSTER
# =============================================================================

def test_roster_lists_registered_and_unregistered_phones(admin_client):
    upload(admin_client, phone=CLIENT_PHONE)
    upload(admin_client, phone=OTHER_PHONE)
    upload(admin_client, phone=OTHER_PHONE)

    response = admin_client.get("/api/clients")
    assert response.status_code == 200

    clients = response.json()["clients"]
    assert [(c["kind"], c["phoneNumber"], c["documentCount"]) for c in clients] == [
        ("registered", CLIENT_PHONE, 1),
        ("unregistered", OTHER_PHONE, 2),
    ]
    assert clients[0]["name"] == "Alice"
    assert clients[1]["name"] is None


def test_roster_is_admin_only(client_session):
    assert client_session.get("/api/clients").status_code == 403
