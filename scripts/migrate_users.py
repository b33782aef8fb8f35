"""
Splits a legacy single 'users' collection into 'admin' and 'clients'

Users keep their _id, so sessions and uploadedBy references stay valid.
Already-migrated users are skipped, so the script can be re-run.
The old collection is left in place; drop it by hand once satisfied.

Run:
    python scripts/migrate_users.py
    python scripts/migrate_users.py --dry-run
"""

import argparse
import asyncio
import sys
from pathlib import Path
import os
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import DuplicateKeyError
import logging

from utils.constants import ADMIN_COLLECTION, CLIENTS_COLLECTION, LEGACY_USERS_COLLECTION

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)

MONGODB_URL = os.getenv("MONGODB_URL")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "docportal")

if not MONGODB_URL:
    raise ValueError("❌ MONGODB_URL must be set in .env file")

TARGET_COLLECTIONS = {
    "admin": ADMIN_COLLECTION,
    "client": CLIENTS_COLLECTION,
}


async def migrate_users(dry_run: bool = False):
    """Copy each legacy user into the collection for its role"""
    client = AsyncIOMotorClient(MONGODB_URL)
    db = client[MONGODB_DB_NAME]

    counts = {"admin": 0, "client": 0, "skipped": 0}

    try:
        users = await db[LEGACY_USERS_COLLECTION].find({}).to_list(length=None)
        logger.info(f"Found {len(users)} users to migrate")

        for user in users:
            role = user.get("role")
            target = TARGET_COLLECTIONS.get(role)
            if target is None:
                logger.warning(f"⚠️ Skipping {user.get('phoneNumber')}: unknown role {role!r}")
                counts["skipped"] += 1
                continue

            user_data = {
                "_id": user["_id"],
                "phoneNumber": user.get("phoneNumber"),
                "password": user.get("password"),
                "name": user.get("name"),
            }

            if dry_run:
                logger.info(f"🔎 Would migrate {role}: {user_data['phoneNumber']}")
                counts[role] += 1
                continue

            try:
                result = await db[target].update_one(
                    {"_id": user_data["_id"]},
                    {"$setOnInsert": user_data},
                    upsert=True
                )
            except DuplicateKeyError:
                logger.warning(f"⚠️ Skipping {user_data['phoneNumber']}: phone number already in '{target}'")
                counts["skipped"] += 1
                continue

            if result.upserted_id is None:
                logger.info(f"ℹ️  Already migrated: {user_data['phoneNumber']}")
                counts["skipped"] += 1
            else:
                logger.info(f"✅ Migrated {role}: {user_data['phoneNumber']}")
                counts[role] += 1

        logger.info("\n✅ Migration complete:")
        logger.info(f"   - {counts['admin']} admin(s) -> '{ADMIN_COLLECTION}'")
        logger.info(f"   - {counts['client']} client(s) -> '{CLIENTS_COLLECTION}'")
        logger.info(f"   - {counts['skipped']} skipped")
        logger.info(f"\n⚠️  Old '{LEGACY_USERS_COLLECTION}' collection still exists. Drop it manually once verified.")

    except Exception as e:
        logger.error(f"❌ Migration failed: {e}")
        raise

    finally:
        client.close()

    return counts


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Split legacy users into admin and clients")
    parser.add_argument("--dry-run", action="store_true", help="report what would be migrated")
    args = parser.parse_args()

    asyncio.run(migrate_users(dry_run=args.dry_run))
