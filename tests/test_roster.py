from app.models.document import Document
from app.models.roster import RegisteredClient, UnregisteredClient
from app.models.user import PublicUser, UserRole
from app.services.roster_service import build_roster


def make_document(index, phone):
    return Document(
        id=f"d{index}",
        file_name=f"doc-{index}.pdf",
        client_phone_number=phone,
        upload_date=f"2024-01-0{index}T00:00:00.000+00:00",
        file_size=100,
        content_ref=f"blob-{index}",
        uploaded_by="admin",
    )


def test_roster_counts_documents_and_surfaces_orphans():
    clients = [
        PublicUser(id="c1", phone_number="+15550000002", name="Alice", role=UserRole.CLIENT),
        PublicUser(id="c2", phone_number="+15550000003", name="Bob", role=UserRole.CLIENT),
    ]
    documents = [
        make_document(1, "+15550000002"),
        make_document(2, "+15550000002"),
        make_document(3, "+15550000009"),
        make_document(4, "+15550000002"),
    ]

    roster = build_roster(clients, documents)

    assert [entry.document_count for entry in roster] == [3, 0, 1]
    assert isinstance(roster[0], RegisteredClient)
    assert isinstance(roster[1], RegisteredClient)

    orphan = roster[2]
    assert isinstance(orphan, UnregisteredClient)
    assert orphan.id == "+15550000009"
    assert orphan.name is None
    assert orphan.role is None


def test_roster_serializes_with_kind_tag():
    roster = build_roster([], [make_document(1, "+15550000009")])
    payload = roster[0].model_dump(mode="json", by_alias=True)
    assert payload == {
        "kind": "unregistered",
        "id": "+15550000009",
        "phoneNumber": "+15550000009",
        "name": None,
        "role": None,
        "documentCount": 1,
    }


def test_empty_roster():
    assert build_roster([], []) == []
