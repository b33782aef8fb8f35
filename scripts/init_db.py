"""
Database initialization script - collections and indexes for the document portal

Run once (safe to re-run) to create indexes:
    python scripts/init_db.py
    python scripts/init_db.py --rebuild   # drop custom indexes first
"""

import argparse
import asyncio
import sys
from pathlib import Path
import os
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

from motor.motor_asyncio import AsyncIOMotorClient
import logging

from app.db.indexes import create_indexes, drop_all_indexes
from utils.constants import ADMIN_COLLECTION, CLIENTS_COLLECTION, DOCUMENTS_COLLECTION

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


MONGODB_URL = os.getenv("MONGODB_URL")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "docportal")
GRIDFS_BUCKET_NAME = os.getenv("GRIDFS_BUCKET_NAME", "document_files")

if not MONGODB_URL:
    raise ValueError("❌ MONGODB_URL must be set in .env file")


async def init_database(rebuild: bool = False):
    """Create (or rebuild) all indexes and report what is there"""

    logger.info(f"🔌 Connecting to MongoDB: {MONGODB_DB_NAME}")
    client = AsyncIOMotorClient(MONGODB_URL)
    db = client[MONGODB_DB_NAME]

    try:
        await client.admin.command('ping')
        logger.info("✅ Connected successfully\n")

        if rebuild:
            logger.info("🧹 Dropping existing indexes...")
            await drop_all_indexes(db)

        # ==================== INDEXES ====================
        logger.info("📋 Creating indexes...")
        await create_indexes(db)

        # ==================== VERIFICATION ====================
        logger.info("\n🔍 Verifying indexes...")

        for collection_name in (ADMIN_COLLECTION, CLIENTS_COLLECTION, DOCUMENTS_COLLECTION):
            indexes = await db[collection_name].index_information()
            logger.info(f"\n  {collection_name}:")
            for idx_name in indexes.keys():
                if idx_name != "_id_":
                    logger.info(f"    ✅ {idx_name}")

        # ==================== STATS ====================
        logger.info("\n📊 Current documents:")
        logger.info(f"  Admins: {await db[ADMIN_COLLECTION].count_documents({})}")
        logger.info(f"  Clients: {await db[CLIENTS_COLLECTION].count_documents({})}")
        logger.info(f"  Documents: {await db[DOCUMENTS_COLLECTION].count_documents({})}")
        logger.info(f"  Stored files: {await db[f'{GRIDFS_BUCKET_NAME}.files'].count_documents({})}")

        logger.info("\n✅ Database initialization complete!")

    except Exception as e:
        logger.error(f"\n❌ Error: {e}")
        raise

    finally:
        client.close()


async def main(rebuild: bool):
    logger.info("=" * 60)
    logger.info("  Document Portal Database Setup")
    logger.info("=" * 60 + "\n")

    await init_database(rebuild=rebuild)

    logger.info("\n" + "=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create document portal indexes")
    parser.add_argument("--rebuild", action="store_true", help="drop custom indexes before creating them")
    args = parser.parse_args()

    asyncio.run(main(args.rebuild))
