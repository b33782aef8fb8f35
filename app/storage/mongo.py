"""
app/storage/mongo.py

Purpose: MongoDB storage backend

- Users partitioned by role: 'admin' and 'clients' collections
- Document metadata in 'documents', PDF bytes in a GridFS bucket
- Content is written before metadata; failed metadata writes remove the content
- Driver errors surface as StorageError, duplicate phones as ConflictError
"""

from typing import Any, AsyncIterator, BinaryIO, Dict, List, Optional

from bson import ObjectId
from gridfs.errors import NoFile
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
    AsyncIOMotorGridFSBucket,
)
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.exceptions import ConflictError, StorageError
from app.core.logging import get_logger
from app.core.security import hash_password
from app.models.document import Document
from app.models.user import PublicUser, User, UserRole
from app.storage.base import CountingReader, Storage
from utils.constants import (
    ADMIN_COLLECTION,
    CLIENTS_COLLECTION,
    DOCUMENTS_COLLECTION,
    PDF_CONTENT_TYPE,
)
from utils.time_utils import utc_now_iso

logger = get_logger(__name__)


def _object_id(value: str) -> Optional[ObjectId]:
    if not value or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def _to_user(raw: Dict[str, Any], role: UserRole) -> User:
    return User(
        id=str(raw["_id"]),
        phone_number=raw["phoneNumber"],
        password_hash=raw["password"],
        name=raw.get("name"),
        role=role,
    )


def _to_document(raw: Dict[str, Any]) -> Document:
    return Document(
        id=str(raw["_id"]),
        file_name=raw["fileName"],
        client_phone_number=raw["clientPhoneNumber"],
        upload_date=raw["uploadDate"],
        file_size=raw["fileSize"],
        content_type=raw.get("contentType", PDF_CONTENT_TYPE),
        content_ref=str(raw["contentRef"]),
        uploaded_by=raw["uploadedBy"],
    )


class MongoStorage(Storage):
    """Motor-backed storage. Motor's connection pool makes it safe to share."""

    name = "mongodb"

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        bucket_name: str = "document_files",
        client: Optional[AsyncIOMotorClient] = None
    ):
        self._database = database
        self._client = client
        self._bucket = AsyncIOMotorGridFSBucket(database, bucket_name=bucket_name)

    def _users_collection(self, role: UserRole) -> AsyncIOMotorCollection:
        if role == UserRole.ADMIN:
            return self._database[ADMIN_COLLECTION]
        return self._database[CLIENTS_COLLECTION]

    @property
    def _documents(self) -> AsyncIOMotorCollection:
        return self._database[DOCUMENTS_COLLECTION]

    # ==============================================
    # CREDENTIAL STORE
    # ==============================================

    async def _find_user(self, query: Dict[str, Any]) -> Optional[User]:
        try:
            for role in (UserRole.ADMIN, UserRole.CLIENT):
                raw = await self._users_collection(role).find_one(query)
                if raw is not None:
                    return _to_user(raw, role)
        except PyMongoError as e:
            raise StorageError(f"User lookup failed: {e}") from e
        return None

    async def create_user(
        self,
        phone_number: str,
        password: str,
        role: UserRole,
        name: Optional[str] = None
    ) -> User:
        if await self.get_user_by_phone_number(phone_number) is not None:
            raise ConflictError()

        record = {
            "phoneNumber": phone_number,
            "password": await hash_password(password),
            "name": name,
        }

        try:
            result = await self._users_collection(role).insert_one(record)
        except DuplicateKeyError as e:
            raise ConflictError() from e
        except PyMongoError as e:
            raise StorageError(f"Failed to create user: {e}") from e

        record["_id"] = result.inserted_id
        user = _to_user(record, role)
        logger.info(f"Created {role.value} user", extra={"user_id": user.id})
        return user

    async def get_user(self, user_id: str) -> Optional[User]:
        oid = _object_id(user_id)
        if oid is None:
            return None
        return await self._find_user({"_id": oid})

    async def get_user_by_phone_number(self, phone_number: str) -> Optional[User]:
        return await self._find_user({"phoneNumber": phone_number})

    async def update_user(
        self,
        user_id: str,
        name: Optional[str] = None,
        phone_number: Optional[str] = None,
        password: Optional[str] = None
    ) -> Optional[User]:
        user = await self.get_user(user_id)
        if user is None:
            return None

        changes: Dict[str, Any] = {}
        if name is not None:
            changes["name"] = name
        if phone_number is not None and phone_number != user.phone_number:
            # The unique index only covers the user's own collection
            owner = await self.get_user_by_phone_number(phone_number)
            if owner is not None and owner.id != user.id:
                raise ConflictError()
            changes["phoneNumber"] = phone_number
        if password is not None:
            changes["password"] = await hash_password(password)

        if not changes:
            return user

        try:
            raw = await self._users_collection(user.role).find_one_and_update(
                {"_id": ObjectId(user.id)},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise ConflictError() from e
        except PyMongoError as e:
            raise StorageError(f"Failed to update user: {e}") from e

        if raw is None:
            return None

        logger.info(
            "User updated",
            extra={"user_id": user_id, "fields": sorted(changes.keys())}
        )
        return _to_user(raw, user.role)

    async def get_all_clients(self) -> List[PublicUser]:
        try:
            cursor = self._users_collection(UserRole.CLIENT).find({}, {"password": 0})
            records = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StorageError(f"Failed to list clients: {e}") from e

        return [
            PublicUser(
                id=str(raw["_id"]),
                phone_number=raw["phoneNumber"],
                name=raw.get("name"),
                role=UserRole.CLIENT,
            )
            for raw in records
        ]

    # ==============================================
    # DOCUMENT STORE
    # ==============================================

    async def _remove_content(self, file_id: ObjectId) -> bool:
        try:
            await self._bucket.delete(file_id)
            return True
        except NoFile:
            logger.warning(f"GridFS file {file_id} already missing")
            return False
        except PyMongoError as e:
            logger.error(f"Failed to remove GridFS file {file_id}: {e}")
            return False

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
            file_id = await self._bucket.upload_from_stream(
                file_name,
                reader,
                metadata={
                    "clientPhoneNumber": client_phone_number,
                    "contentType": content_type,
                },
            )
        except (PyMongoError, OSError) as e:
            raise StorageError(f"Failed to store document content: {e}") from e

        if reader.bytes_read != file_size:
            await self._remove_content(file_id)
            raise StorageError(
                "Stored content length does not match declared file size",
                details={"declared": file_size, "actual": reader.bytes_read},
            )

        record = {
            "fileName": file_name,
            "clientPhoneNumber": client_phone_number,
            "uploadDate": utc_now_iso(),
            "fileSize": file_size,
            "contentType": content_type,
            "contentRef": file_id,
            "uploadedBy": uploaded_by,
        }

        try:
            result = await self._documents.insert_one(record)
        except PyMongoError as e:
            await self._remove_content(file_id)
            raise StorageError(f"Failed to store document metadata: {e}") from e

        record["_id"] = result.inserted_id
        return _to_document(record)

    async def get_document(self, document_id: str) -> Optional[Document]:
        oid = _object_id(document_id)
        if oid is None:
            return None

        try:
            raw = await self._documents.find_one({"_id": oid})
        except PyMongoError as e:
            raise StorageError(f"Document lookup failed: {e}") from e

        return _to_document(raw) if raw is not None else None

    async def _find_documents(self, query: Dict[str, Any]) -> List[Document]:
        try:
            cursor = self._documents.find(query).sort([("uploadDate", DESCENDING), ("_id", DESCENDING)])
            records = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StorageError(f"Failed to list documents: {e}") from e

        return [_to_document(raw) for raw in records]

    async def get_documents_by_client(self, phone_number: str) -> List[Document]:
        return await self._find_documents({"clientPhoneNumber": phone_number})

    async def get_all_documents(self) -> List[Document]:
        return await self._find_documents({})

    async def open_document_stream(self, content_ref: str) -> Optional[AsyncIterator[bytes]]:
        file_id = _object_id(content_ref)
        if file_id is None:
            return None

        try:
            grid_out = await self._bucket.open_download_stream(file_id)
        except NoFile:
            return None
        except PyMongoError as e:
            raise StorageError(f"Failed to open document content: {e}") from e

        async def iterate() -> AsyncIterator[bytes]:
            while True:
                chunk = await grid_out.readchunk()
                if not chunk:
                    break
                yield chunk

        return iterate()

    async def delete_document(self, document_id: str) -> bool:
        oid = _object_id(document_id)
        if oid is None:
            return False

        try:
            raw = await self._documents.find_one_and_delete({"_id": oid})
        except PyMongoError as e:
            raise StorageError(f"Failed to delete document metadata: {e}") from e

        if raw is None:
            return False

        content_id = raw.get("contentRef")
        if isinstance(content_id, str):
            content_id = _object_id(content_id)

        if content_id is None or not await self._remove_content(content_id):
            logger.warning(
                "Document metadata deleted but content removal failed",
                extra={"document_id": document_id}
            )

        return True

    # ==============================================
    # LIFECYCLE
    # ==============================================

    async def ping(self) -> bool:
        try:
            await self._database.command("ping")
            return True
        except PyMongoError as e:
            logger.error(f"Database health check failed: {str(e)}")
            return False

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.info("MongoDB connection closed")
