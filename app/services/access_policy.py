"""
app/services/access_policy.py

Purpose: Authorization rules

- Admin-only actions: upload, batch upload, delete, roster, profile update
- Document reads: admins, or the client whose phone number owns the document
- Listing scope: clients only ever see their own phone number's documents

All functions are pure: they look only at the session and the document.
"""

from typing import Optional

from app.core.exceptions import AuthorizationError
from app.models.document import Document
from app.models.session import SessionIdentity
from utils.constants import (
    ADMIN_ONLY_MESSAGE,
    DOCUMENT_ACCESS_DENIED_MESSAGE,
    FOREIGN_DOCUMENTS_MESSAGE,
)


def require_admin(session: SessionIdentity) -> SessionIdentity:
    """
    Raises:
        AuthorizationError: If the session is not an admin
    """
    if not session.is_admin:
        raise AuthorizationError(ADMIN_ONLY_MESSAGE)
    return session


def can_read_document(session: SessionIdentity, document: Document) -> bool:
    if session.is_admin:
        return True
    return document.client_phone_number == session.phone_number


def ensure_can_read_document(session: SessionIdentity, document: Document) -> Document:
    """
    Raises:
        AuthorizationError: If the session neither is admin nor owns the document
    """
    if not can_read_document(session, document):
        raise AuthorizationError(DOCUMENT_ACCESS_DENIED_MESSAGE)
    return document


def resolve_listing_scope(session: SessionIdentity, requested_phone: Optional[str] = None) -> Optional[str]:
    """
    Decides which phone number a document listing is filtered by.

    Args:
        session: Current session
        requested_phone: Phone number from the query string, if any

    Returns:
        Phone number to filter by, or None for every document (admins only)

    Raises:
        AuthorizationError: If a client asks for another phone's documents
    """
    if session.is_admin:
        return requested_phone or None

    if requested_phone and requested_phone != session.phone_number:
        raise AuthorizationError(FOREIGN_DOCUMENTS_MESSAGE)

    return session.phone_number
