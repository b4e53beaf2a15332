# database.py
import logging

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import OperationFailure, PyMongoError

logger = logging.getLogger(__name__)


class MongoConnection:
    """Owns the async MongoDB client for the lifetime of the app"""

    def __init__(self, settings):
        self.settings = settings
        self.client = None
        self.database = None

    def connect(self):
        if self.client is None:
            self.client = AsyncIOMotorClient(
                self.settings.mongodb_url,
                serverSelectionTimeoutMS=self.settings.server_selection_timeout_ms,
                tz_aware=True,
            )
            self.database = self.client[self.settings.db_name]
            logger.info("✅ Async MongoDB client initialized for: %s", self.settings.db_name)
        return self.database

    @property
    def collection(self):
        if self.database is None:
            raise RuntimeError("MongoConnection.connect() has not been called")
        return self.database[self.settings.collection_name]

    async def ping(self):
        """Test the connection (called during startup)"""
        if self.database is None:
            return False
        try:
            await self.database.command("ping")
            logger.info("✅ Async MongoDB connection test successful!")
            return True
        except OperationFailure as e:
            logger.error("❌ MongoDB authentication failed: %s", e)
            return False
        except PyMongoError as e:
            logger.error("❌ MongoDB connection error: %s", e)
            return False

    def close(self):
        if self.client is not None:
            self.client.close()
            self.client = None
            self.database = None
            logger.info("✅ Async MongoDB connection closed")
