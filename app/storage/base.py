"""
app/storage/base.py

Purpose: Storage interface shared by every backend

- Credential store: users (admin/client), password hashing and verification
- Document store: metadata plus streamed binary content
- Backends: MemoryStorage (degraded mode) and MongoStorage (MongoDB + GridFS)
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, BinaryIO, List, Optional

from app.core.security import hash_password, verify_password_hash
from app.models.document import Document
from app.models.user import PublicUser, User, UserRole
from utils.constants import PDF_CONTENT_TYPE


class CountingReader:
    """
    Wraps a binary stream and counts the bytes read through it, so a
    backend can check the stored length against the declared file size.
    """

    def __init__(self, source: BinaryIO):
        self._source = source
        self.bytes_read = 0

    def read(self, size: int = -1) -> bytes:
        chunk = self._source.read(size)
        self.bytes_read += len(chunk)
        return chunk


class Storage(ABC):
    """
    Persistence for users and documents.

    Implementations must be safe for concurrent use by many requests;
    callers never lock around them.
    """

    name: str = "abstract"

    # ==============================================
    # CREDENTIAL STORE
    # ==============================================

    @abstractmethod
    async def create_user(
        self,
        phone_number: str,
        password: str,
        role: UserRole,
        name: Optional[str] = None
    ) -> User:
        """
        Creates a user with a hashed password.

        Raises:
            ConflictError: If the phone number is registered under any role
        """

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        """Returns the user with this id, or None (also for malformed ids)."""

    @abstractmethod
    async def get_user_by_phone_number(self, phone_number: str) -> Optional[User]:
        """Returns the admin or client owning this phone number, or None."""

    @abstractmethod
    async def update_user(
        self,
        user_id: str,
        name: Optional[str] = None,
        phone_number: Optional[str] = None,
        password: Optional[str] = None
    ) -> Optional[User]:
        """
        Applies the given fields and returns the updated user, or None when
        the user does not exist. A new password is hashed before storing.

        Uniqueness of a new phone number is checked by the caller first;
        a collision the backend still detects raises ConflictError.
        """

    @abstractmethod
    async def get_all_clients(self) -> List[PublicUser]:
        """Returns every client account without password hashes."""

    async def verify_password(self, phone_number: str, password: str) -> Optional[User]:
        """
        Checks a login attempt.

        Returns:
            The user on success; None for an unknown phone number or a wrong
            password alike, so callers cannot tell which part failed
        """
        user = await self.get_user_by_phone_number(phone_number)
        if user is None:
            # Unknown numbers pay the same hashing cost as known ones
            await hash_password(password)
            return None

        if not await verify_password_hash(password, user.password_hash):
            return None

        return user

    # ==============================================
    # DOCUMENT STORE
    # ==============================================

    @abstractmethod
    async def create_document(
        self,
        file_name: str,
        client_phone_number: str,
        file_size: int,
        uploaded_by: str,
        content: BinaryIO,
        content_type: str = PDF_CONTENT_TYPE
    ) -> Document:
        """
        Stores content then metadata.

        No metadata is committed unless the content was fully written, and
        written content is removed again if the metadata write fails.

        Raises:
            StorageError: If either write fails or the stored length differs
                from file_size
        """

    @abstractmethod
    async def get_document(self, document_id: str) -> Optional[Document]:
        """Returns document metadata, or None."""

    @abstractmethod
    async def get_documents_by_client(self, phone_number: str) -> List[Document]:
        """Documents owned by a phone number, newest first."""

    @abstractmethod
    async def get_all_documents(self) -> List[Document]:
        """All documents, newest first."""

    @abstractmethod
    async def open_document_stream(self, content_ref: str) -> Optional[AsyncIterator[bytes]]:
        """
        Opens stored content for reading.

        Returns:
            Async iterator of byte chunks, or None when the content is missing
        """

    @abstractmethod
    async def delete_document(self, document_id: str) -> bool:
        """
        Removes metadata, then content.

        Returns:
            True if the metadata was removed; a failure to remove content is
            logged and does not change the result
        """

    # ==============================================
    # LIFECYCLE
    # ==============================================

    async def ping(self) -> bool:
        """Reports whether the backing store is reachable."""
        return True

    async def close(self) -> None:
        """Releases connections held by the backend."""
