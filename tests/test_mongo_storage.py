import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from gridfs.errors import NoFile
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.exceptions import ConflictError, StorageError
from app.models.user import UserRole
from app.storage import mongo as mongo_module
from app.storage.mongo import MongoStorage


class FakeDatabase:
    """Hands out one mocked collection per name."""

    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            collection = MagicMock()
            collection.find_one = AsyncMock(return_value=None)
            collection.insert_one = AsyncMock()
            collection.find_one_and_delete = AsyncMock(return_value=None)
            collection.find_one_and_update = AsyncMock(return_value=None)
            self.collections[name] = collection
        return self.collections[name]


@pytest.fixture
def bucket():
    fake = MagicMock()
    fake.delete = AsyncMock()
    fake.open_download_stream = AsyncMock()

    async def upload_from_stream(file_name, source, metadata=None):
        while source.read(4):
            pass
        return ObjectId()

    fake.upload_from_stream = AsyncMock(side_effect=upload_from_stream)
    return fake


@pytest.fixture
def database():
    return FakeDatabase()


@pytest.fixture
def storage(database, bucket, monkeypatch):
    monkeypatch.setattr(mongo_module, "AsyncIOMotorGridFSBucket", lambda db, bucket_name: bucket)
    monkeypatch.setattr(mongo_module, "hash_password", AsyncMock(return_value="hashed"))
    return MongoStorage(database)


@pytest.mark.asyncio
async def test_duplicate_key_becomes_conflict(storage, database):
    database["clients"].insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")

    with pytest.raises(ConflictError):
        await storage.create_user("+15550000002", "secret1", UserRole.CLIENT)


@pytest.mark.asyncio
async def test_phone_registered_as_admin_conflicts_for_client(storage, database):
    database["admin"].find_one.return_value = {
        "_id": ObjectId(), "phoneNumber": "+15550000001", "password": "h", "name": None,
    }

    with pytest.raises(ConflictError):
        await storage.create_user("+15550000001", "secret1", UserRole.CLIENT)

    database["clients"].insert_one.assert_not_called()


@pytest.mark.asyncio
async def test_create_user_stores_hash_in_role_collection(storage, database):
    inserted_id = ObjectId()
    database["admin"].insert_one.return_value = MagicMock(inserted_id=inserted_id)

    user = await storage.create_user("+15550000001", "secret1", UserRole.ADMIN, name="Admin")

    record = database["admin"].insert_one.call_args.args[0]
    assert record["password"] == "hashed"
    assert record["phoneNumber"] == "+15550000001"
    assert user.id == str(inserted_id)
    assert user.role == UserRole.ADMIN


@pytest.mark.asyncio
async def test_malformed_id_is_not_found(storage, database):
    assert await storage.get_user("not-an-object-id") is None
    assert await storage.get_document("nope") is None
    database["admin"].find_one.assert_not_called()


@pytest.mark.asyncio
async def test_metadata_failure_removes_written_content(storage, database, bucket):
    database["documents"].insert_one.side_effect = PyMongoError("write failed")

    with pytest.raises(StorageError):
        await storage.create_document(
            file_name="doc.pdf",
            client_phone_number="+15550000002",
            file_size=10,
            uploaded_by="admin-id",
            content=io.BytesIO(b"%PDF-12345"),
        )

    file_id = bucket.delete.call_args.args[0]
    assert isinstance(file_id, ObjectId)


@pytest.mark.asyncio
async def test_size_mismatch_rolls_back_content(storage, database, bucket):
    with pytest.raises(StorageError):
        await storage.create_document(
            file_name="doc.pdf",
            client_phone_number="+15550000002",
            file_size=500,
            uploaded_by="admin-id",
            content=io.BytesIO(b"%PDF-12345"),
        )

    bucket.delete.assert_awaited_once()
    database["documents"].insert_one.assert_not_called()


@pytest.mark.asyncio
async def test_create_document_records_camel_case_fields(storage, database):
    database["documents"].insert_one.return_value = MagicMock(inserted_id=ObjectId())

    document = await storage.create_document(
        file_name="doc.pdf",
        client_phone_number="+15550000002",
        file_size=10,
        uploaded_by="admin-id",
        content=io.BytesIO(b"%PDF-12345"),
    )

    record = database["documents"].insert_one.call_args.args[0]
    assert record["clientPhoneNumber"] == "+15550000002"
    assert record["fileSize"] == 10
    assert isinstance(record["contentRef"], ObjectId)
    assert document.content_ref == str(record["contentRef"])


@pytest.mark.asyncio
async def test_missing_content_opens_as_none(storage, bucket):
    bucket.open_download_stream.side_effect = NoFile("gone")

    assert await storage.open_document_stream(str(ObjectId())) is None
    assert await storage.open_document_stream("garbage") is None


@pytest.mark.asyncio
async def test_delete_succeeds_when_content_already_gone(storage, database, bucket):
    content_id = ObjectId()
    database["documents"].find_one_and_delete.return_value = {"_id": ObjectId(), "contentRef": content_id}
    bucket.delete.side_effect = NoFile("gone")

    assert await storage.delete_document(str(ObjectId())) is True
    bucket.delete.assert_awaited_once_with(content_id)


@pytest.mark.asyncio
async def test_delete_unknown_document_returns_false(storage, bucket):
    assert await storage.delete_document(str(ObjectId())) is False
    bucket.delete.assert_not_called()
