"""
app/db/mongo.py

Purpose: MongoDB connection setup

- Creates the Motor client with connection pooling
- Retries the initial connection with exponential backoff
- The client is owned by the storage provider, not by this module
"""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
import asyncio
from app.core.logging import get_logger

logger = get_logger(__name__)


async def connect_to_mongo(
    mongodb_url: str,
    max_retries: int = 3,
    retry_delay: float = 2
) -> AsyncIOMotorClient:
    """
    Establishes connection to MongoDB with retry logic.

    Args:
        mongodb_url: Connection URI
        max_retries: Connection attempts before giving up
        retry_delay: Initial delay between attempts in seconds (doubles each time)

    Returns:
        Connected AsyncIOMotorClient

    Raises:
        ConnectionError: If no attempt succeeds
    """
    for attempt in range(1, max_retries + 1):
        client = None
        try:
            logger.info(
                f"Attempting to connect to MongoDB (attempt {attempt}/{max_retries})"
            )

            client = AsyncIOMotorClient(
                mongodb_url,
                maxPoolSize=50,
                minPoolSize=5,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=10000,
                retryWrites=True,
                retryReads=True,
            )

            # Verify connection
            await client.admin.command("ping")

            logger.info("✅ Successfully connected to MongoDB")
            return client

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            if client is not None:
                client.close()

            logger.error(
                f"Failed to connect to MongoDB (attempt {attempt}/{max_retries}): {e}"
            )

            if attempt < max_retries:
                logger.info(f"Retrying in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
                retry_delay *= 2  # Exponential backoff
            else:
                logger.critical("Failed to connect to MongoDB after all retries")
                raise ConnectionError("Could not establish MongoDB connection") from e


def get_database(client: AsyncIOMotorClient, db_name: str) -> AsyncIOMotorDatabase:
    """
    Returns the named database from a connected client.
    """
    return client[db_name]
