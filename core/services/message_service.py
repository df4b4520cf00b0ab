# =============================================================================
# core/services/message_service.py - Contact Messages
# =============================================================================
# Append-only: messages are stored and listed, never edited.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING

from core.models.message import MessageCreate
from lib.mongo_client import MESSAGES
from lib.utils import insert_result, serialize_documents

logger = logging.getLogger(__name__)


class MessageService:

    @staticmethod
    async def create_message(db: AsyncIOMotorDatabase, request: MessageCreate) -> dict[str, Any]:
        document = request.model_dump()
        document.pop("_id", None)
        document["createdAt"] = datetime.now(timezone.utc)

        result = await db[MESSAGES].insert_one(document)
        logger.info(f"Stored message {result.inserted_id}")
        return insert_result(result)

    @staticmethod
    async def list_messages(
        db: AsyncIOMotorDatabase,
        limit: int = 20,
        skip: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        total = await db[MESSAGES].count_documents({})
        cursor = db[MESSAGES].find({}).sort("createdAt", DESCENDING).skip(skip).limit(limit)
        return serialize_documents(await cursor.to_list(length=limit)), total
