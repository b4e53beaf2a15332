"""
Transaction resource service backed by a MongoDB collection
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from transaction_service.errors import NotFoundError, StorageError, ValidationError
from transaction_service.models import (
    StatusUpdate,
    Transaction,
    TransactionCreate,
    parse_object_id,
    parse_user_id,
)

logger = logging.getLogger(__name__)


def _object_id(transaction_id: str, message: str):
    # a malformed id is reported like any other storage failure
    try:
        return parse_object_id(transaction_id)
    except ValidationError as e:
        logger.error("%s: malformed id %r", message, transaction_id)
        raise StorageError(message) from e


class TransactionService:
    """Create, list, fetch and update transactions in one collection"""

    def __init__(self, collection):
        # AsyncIOMotorCollection, or anything exposing the same coroutines
        self.collection = collection

    async def ensure_indexes(self):
        try:
            await self.collection.create_index([("user", 1)])
            logger.info("✅ MongoDB indexes created/verified")
        except PyMongoError as e:
            logger.warning("⚠️ Could not create indexes: %s", e)

    async def ping(self) -> bool:
        try:
            await self.collection.database.command("ping")
            return True
        except PyMongoError as e:
            logger.error("❌ MongoDB ping failed: %s", e)
            return False

    async def create(self, payload: Dict[str, Any]) -> Transaction:
        data = TransactionCreate.from_payload(payload)
        document = data.to_document(now=datetime.now(timezone.utc))
        try:
            result = await self.collection.insert_one(document)
        except PyMongoError as e:
            logger.exception("Error creating transaction")
            raise StorageError("Error creating transaction") from e

        document["_id"] = result.inserted_id
        return Transaction.from_document(document)

    async def list_by_user(self, user_id: Any) -> List[Transaction]:
        message = "User ID is required and must be an integer"
        if user_id is None:
            raise ValidationError(message)
        try:
            user = parse_user_id(user_id, field="user_id")
        except ValidationError:
            raise ValidationError(message)
        if user == 0:
            raise ValidationError(message)

        try:
            documents = await self.collection.find({"user": user}).to_list(length=None)
        except PyMongoError as e:
            logger.exception("Error fetching transactions")
            raise StorageError("Error fetching transactions") from e

        return [Transaction.from_document(doc) for doc in documents]

    async def get_by_id(self, transaction_id: str) -> Transaction:
        object_id = _object_id(transaction_id, "Error fetching transaction")
        try:
            document = await self.collection.find_one({"_id": object_id})
        except PyMongoError as e:
            logger.exception("Error fetching transaction %s", transaction_id)
            raise StorageError("Error fetching transaction") from e

        if not document:
            raise NotFoundError("Transaction not found")
        return Transaction.from_document(document)

    async def update_status(self, transaction_id: str, payload: Dict[str, Any]) -> Transaction:
        # status first, so a bad status fails the same way for any id
        update = StatusUpdate.from_payload(payload)
        object_id = _object_id(transaction_id, "Error updating transaction status")
        try:
            document = await self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": {"status": update.status.value}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.exception("Error updating transaction status %s", transaction_id)
            raise StorageError("Error updating transaction status") from e

        if not document:
            raise NotFoundError("Transaction not found")
        logger.info("Transaction %s status set to %s", transaction_id, update.status.value)
        return Transaction.from_document(document)
