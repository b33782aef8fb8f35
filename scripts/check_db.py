"""
Quick look at what the document portal database holds

Run: python scripts/check_db.py
"""

import asyncio
import sys
from pathlib import Path
import os
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

from motor.motor_asyncio import AsyncIOMotorClient
import logging

from utils.constants import ADMIN_COLLECTION, CLIENTS_COLLECTION, DOCUMENTS_COLLECTION
from utils.time_utils import format_timestamp

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

MONGODB_URL = os.getenv("MONGODB_URL")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "docportal")

if not MONGODB_URL:
    raise ValueError("❌ MONGODB_URL must be set in .env file")


async def check_collections():
    """List collections, users and documents"""
    print("=" * 60)
    print("  Document Portal Database Check")
    print("=" * 60 + "\n")

    client = AsyncIOMotorClient(MONGODB_URL)
    db = client[MONGODB_DB_NAME]

    try:
        await client.admin.command('ping')

        collections = await db.list_collection_names()
        logger.info(f"📦 Collections: {collections if collections else '(none yet)'}")

        for title, name in (("ADMIN", ADMIN_COLLECTION), ("CLIENTS", CLIENTS_COLLECTION)):
            users = await db[name].find({}, {"password": 0}).to_list(length=None)
            logger.info(f"\n=== {title} collection ===")
            logger.info(f"Found {len(users)} user(s):")
            for user in users:
                logger.info(f"  - Phone: {user.get('phoneNumber')}, Name: {user.get('name') or 'N/A'}")

        documents = await db[DOCUMENTS_COLLECTION].find({}).to_list(length=None)
        logger.info(f"\n=== DOCUMENTS collection ===")
        logger.info(f"Found {len(documents)} document(s):")
        for doc in documents:
            logger.info(
                f"  - File: {doc.get('fileName')}, Client: {doc.get('clientPhoneNumber')}, "
                f"Uploaded: {format_timestamp(doc.get('uploadDate'))}"
            )

        logger.info("\n✅ Database structure verified successfully!")

    except Exception as e:
        logger.error(f"❌ Error checking database: {e}")
        raise

    finally:
        client.close()

    print("\n" + "=" * 60)


if __name__ == "__main__":
    asyncio.run(check_collections())
