# async mongodb client for the mood journal api
# uses motor for non-blocking operations

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument

from mood_journal.config import settings

logger = logging.getLogger(__name__)


class Database:
    """async mongodb connection manager"""

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self):
        """establish connection to mongodb and make sure indexes exist"""
        if self.client is not None:
            return

        logger.info(f"Connecting to MongoDB database: {settings.MONGODB_DATABASE}")
        self.client = AsyncIOMotorClient(settings.MONGODB_URI)
        self.db = self.client[settings.MONGODB_DATABASE]

        # verify connection
        await self.client.admin.command("ping")
        await self.ensure_indexes()
        logger.info("MongoDB connection established")

    async def ensure_indexes(self):
        """create the lookup indexes the routers rely on"""
        await self.users.create_index([("provider", 1), ("provider_id", 1)], unique=True)
        await self.diaries.create_index("id", unique=True)
        await self.diaries.create_index("user_id")
        await self.diaries.create_index("share_token", sparse=True)
        await self.comments.create_index([("entry_id", 1), ("created_at", -1)])
        await self.emotion_analyses.create_index("diary_id", unique=True)

    async def close(self):
        """close mongodb connection"""
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("MongoDB connection closed")

    # collection accessors

    @property
    def users(self):
        return self.db["users"]

    @property
    def diaries(self):
        return self.db["diaries"]

    @property
    def comments(self):
        return self.db["comments"]

    @property
    def emotion_analyses(self):
        return self.db["emotion_analyses"]

    @property
    def counters(self):
        return self.db["counters"]


# singleton instance
db = Database()


async def get_db() -> Database:
    """dependency injection for database access"""
    return db


async def next_sequence(database: Database, name: str) -> int:
    """atomically increment and return the named counter (diary and comment ids)"""
    doc = await database.counters.find_one_and_update(
        {"_id": name},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return int(doc["seq"])
