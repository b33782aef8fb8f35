"""
app/db/indexes.py

Purpose: Database index management

- Unique phone number per user collection (admin, clients)
- Document lookups by owner and newest-first sorting
"""

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from app.core.logging import get_logger
from utils.constants import ADMIN_COLLECTION, CLIENTS_COLLECTION, DOCUMENTS_COLLECTION

logger = get_logger(__name__)


async def create_indexes(database: AsyncIOMotorDatabase):
    """
    Creates all necessary database indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        admins = database[ADMIN_COLLECTION]
        clients = database[CLIENTS_COLLECTION]
        documents = database[DOCUMENTS_COLLECTION]

        logger.info("Creating database indexes...")

        # ==============================================
        # USER COLLECTIONS
        # ==============================================

        await admins.create_index(
            [("phoneNumber", ASCENDING)],
            unique=True,
            name="admin_phone_unique"
        )
        logger.debug("Created unique index on admin.phoneNumber")

        await clients.create_index(
            [("phoneNumber", ASCENDING)],
            unique=True,
            name="clients_phone_unique"
        )
        logger.debug("Created unique index on clients.phoneNumber")

        # ==============================================
        # DOCUMENTS COLLECTION
        # ==============================================

        await documents.create_index(
            [("clientPhoneNumber", ASCENDING)],
            name="documents_client_idx"
        )
        logger.debug("Created index on documents.clientPhoneNumber")

        await documents.create_index(
            [("uploadDate", DESCENDING)],
            name="documents_upload_date_idx"
        )
        logger.debug("Created index on documents.uploadDate")

        # Client document list, newest first
        await documents.create_index(
            [("clientPhoneNumber", ASCENDING), ("uploadDate", DESCENDING)],
            name="documents_client_upload_date_idx"
        )
        logger.debug("Created compound index on documents.clientPhoneNumber + uploadDate")

        logger.info("✅ All database indexes created successfully")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise


async def drop_all_indexes(database: AsyncIOMotorDatabase):
    """
    Drops all custom indexes (keeps _id index).
    Use with caution! Only for maintenance/migration.
    """
    try:
        logger.warning("Dropping all database indexes...")

        for name in (ADMIN_COLLECTION, CLIENTS_COLLECTION, DOCUMENTS_COLLECTION):
            await database[name].drop_indexes()

        logger.info("✅ All indexes dropped successfully")

    except Exception as e:
        logger.error(f"Failed to drop indexes: {str(e)}", exc_info=True)
        raise
