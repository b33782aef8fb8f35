import pytest

from app.core.exceptions import AuthorizationError
from app.models.document import Document
from app.models.session import SessionIdentity
from app.models.user import UserRole
from app.services.access_policy import (
    can_read_document,
    ensure_can_read_document,
    require_admin,
    resolve_listing_scope,
)

ADMIN = SessionIdentity(user_id="a1", phone_number="+15550000001", role=UserRole.ADMIN)
ALICE = SessionIdentity(user_id="c1", phone_number="+15550000002", role=UserRole.CLIENT)


def make_document(phone):
    return Document(
        id="d1",
        file_name="report.pdf",
        client_phone_number=phone,
        upload_date="2024-01-01T00:00:00.000+00:00",
        file_size=10,
        content_ref="blob",
        uploaded_by="a1",
    )


def test_require_admin():
    assert require_admin(ADMIN) is ADMIN
    with pytest.raises(AuthorizationError):
        require_admin(ALICE)


def test_document_reads():
    own = make_document(ALICE.phone_number)
    foreign = make_document("+15550000009")

    assert can_read_document(ADMIN, foreign)
    assert can_read_document(ALICE, own)
    assert not can_read_document(ALICE, foreign)

    with pytest.raises(AuthorizationError):
        ensure_can_read_document(ALICE, foreign)


def test_admin_listing_scope():
    assert resolve_listing_scope(ADMIN) is None
    assert resolve_listing_scope(ADMIN, "+15550000009") == "+15550000009"


def test_client_listing_scope_is_always_their_own_phone():
    assert resolve_listing_scope(ALICE) == ALICE.phone_number
    assert resolve_listing_scope(ALICE, ALICE.phone_number) == ALICE.phone_number

    with pytest.raises(AuthorizationError):
        resolve_listing_scope(ALICE, "+15550000009")


def test_session_identity_round_trip_and_rejects_garbage():
    assert SessionIdentity.from_session(ALICE.to_session()) == ALICE
    assert SessionIdentity.from_session({}) is None
    assert SessionIdentity.from_session({"user_id": "x", "phone_number": "+1", "role": "root"}) is None
