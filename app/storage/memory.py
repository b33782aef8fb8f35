"""
app/storage/memory.py

Purpose: In-memory storage backend (degraded mode)

- Used when no MongoDB is configured or reachable
- Users, documents and PDF bytes live in process memory
- Everything is lost on restart
"""

import asyncio
import itertools
from typing import AsyncIterator, BinaryIO, Dict, List, Optional
from uuid import uuid4

from app.core.exceptions import ConflictError, StorageError
from app.core.logging import get_logger
from app.core.security import hash_password
from app.models.document import Document
from app.models.user import PublicUser, User, UserRole
from app.storage.base import CountingReader, Storage
from utils.constants import CHUNK_SIZE, PDF_CONTENT_TYPE
from utils.time_utils import utc_now_iso

logger = get_logger(__name__)


class MemoryStorage(Storage):
    """Dict-backed storage; mutations are serialized by one asyncio lock."""

    name = "memory"

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._documents: Dict[str, Document] = {}
        self._blobs: Dict[str, bytes] = {}
        # Insertion sequence breaks ties between equal upload timestamps
        self._document_seq: Dict[str, int] = {}
        self._counter = itertools.count()
        self._lock = asyncio.Lock()

    # ==============================================
    # CREDENTIAL STORE
    # ==============================================

    def _find_by_phone(self, phone_number: str) -> Optional[User]:
        for user in self._users.values():
            if user.phone_number == phone_number:
                return user
        return None

    async def create_user(
        self,
        phone_number: str,
        password: str,
        role: UserRole,
        name: Optional[str] = None
    ) -> User:
        password_hash = await hash_password(password)

        async with self._lock:
            if self._find_by_phone(phone_number) is not None:
                raise ConflictError()

            user = User(
                id=uuid4().hex,
                phone_number=phone_number,
                password_hash=password_hash,
                name=name,
                role=role,
            )
            self._users[user.id] = user

        logger.info(f"Created {role.value} user", extra={"user_id": user.id})
        return user

    async def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    async def get_user_by_phone_number(self, phone_number: str) -> Optional[User]:
        return self._find_by_phone(phone_number)

    async def update_user(
        self,
        user_id: str,
        name: Optional[str] = None,
        phone_number: Optional[str] = None,
        password: Optional[str] = None
    ) -> Optional[User]:
        updates = {}
        if name is not None:
            updates["name"] = name
        if phone_number is not None:
            updates["phone_number"] = phone_number
        if password is not None:
            updates["password_hash"] = await hash_password(password)

        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None

            if phone_number is not None and phone_number != user.phone_number:
                if self._find_by_phone(phone_number) is not None:
                    raise ConflictError()

            updated = user.model_copy(update=updates)
            self._users[user_id] = updated

        logger.info(
            "User updated",
            extra={"user_id": user_id, "fields": sorted(updates.keys())}
        )
        return updated

    async def get_all_clients(self) -> List[PublicUser]:
        return [
            user.to_public()
            for user in self._users.values()
            if user.role == UserRole.CLIENT
        ]

    # ==============================================
    # DOCUMENT STORE
    # ==============================================

    def _newest_first(self, documents: List[Document]) -> List[Document]:
        return sorted(
            documents,
            key=lambda doc: (doc.upload_date, self._document_seq.get(doc.id, 0)),
            reverse=True,
        )

    async def create_document(
        self,
        file_name: str,
        client_phone_number: str,
        file_size: int,
        uploaded_by: str,
        content: BinaryIO,
        content_type: str = PDF_CONTENT_TYPE
    ) -> Document:
        reader = CountingReader(content)
        try:
            data = await asyncio.to_thread(reader.read)
        except OSError as e:
            raise StorageError(f"Failed to read upload content: {e}") from e

        if len(data) != file_size:
            raise StorageError(
                "Stored content length does not match declared file size",
                details={"declared": file_size, "actual": len(data)},
            )

        document_id = uuid4().hex
        content_ref = uuid4().hex

        async with self._lock:
            self._blobs[content_ref] = data
            document = Document(
                id=document_id,
                file_name=file_name,
                client_phone_number=client_phone_number,
                upload_date=utc_now_iso(),
                file_size=file_size,
                content_type=content_type,
                content_ref=content_ref,
                uploaded_by=uploaded_by,
            )
            self._documents[document_id] = document
            self._document_seq[document_id] = next(self._counter)

        return document

    async def get_document(self, document_id: str) -> Optional[Document]:
        return self._documents.get(document_id)

    async def get_documents_by_client(self, phone_number: str) -> List[Document]:
        return self._newest_first([
            doc for doc in self._documents.values()
            if doc.client_phone_number == phone_number
        ])

    async def get_all_documents(self) -> List[Document]:
        return self._newest_first(list(self._documents.values()))

    async def open_document_stream(self, content_ref: str) -> Optional[AsyncIterator[bytes]]:
        data = self._blobs.get(content_ref)
        if data is None:
            return None

        async def iterate() -> AsyncIterator[bytes]:
            for start in range(0, len(data), CHUNK_SIZE):
                yield data[start:start + CHUNK_SIZE]

        return iterate()

    async def delete_document(self, document_id: str) -> bool:
        async with self._lock:
            document = self._documents.pop(document_id, None)
            if document is None:
                return False
            self._document_seq.pop(document_id, None)

            if self._blobs.pop(document.content_ref, None) is None:
                logger.warning(
                    "Document content already missing during delete",
                    extra={"document_id": document_id}
                )

        return True
