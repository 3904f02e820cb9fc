"""Process-wide Motor client.

``get_db`` is the FastAPI dependency every router uses; tests override it
with an in-memory database.
"""

from __future__ import annotations

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from vrtravel.config import APP_NAME, MONGO_SERVER_SELECTION_TIMEOUT_MS, mongo_db_name, mongo_url

logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None


async def connect_mongo() -> AsyncIOMotorDatabase:
    global _client

    if _client is None:
        _client = AsyncIOMotorClient(
            mongo_url(),
            tz_aware=True,
            appname=APP_NAME,
            serverSelectionTimeoutMS=MONGO_SERVER_SELECTION_TIMEOUT_MS,
        )
        logger.info("Mongo client created for database %s", mongo_db_name())
    return _client[mongo_db_name()]


async def close_mongo() -> None:
    global _client

    client, _client = _client, None
    if client is not None:
        client.close()


async def get_db() -> AsyncIOMotorDatabase:
    return await connect_mongo()


async def ping(db: AsyncIOMotorDatabase) -> bool:
    try:
        await db.command("ping")
    except PyMongoError:
        logger.warning("Mongo ping failed", exc_info=True)
        return False
    return True
