# =============================================================================
# lib/mongo_client.py - MongoDB Client Wrapper
# =============================================================================
# This module owns the single Motor client shared by every request.
# Motor pools connections internally, so one client per process is enough;
# handlers never create their own, they receive the database handle through
# the FastAPI dependency in app/dependencies.py.
#
# Usage:
#   from lib.mongo_client import MongoConnection, LOANS
#   db = MongoConnection.get_database()
#   loan = await db[LOANS].find_one({"showOnHome": True})
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from app.config import settings

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Collection names
# -----------------------------------------------------------------------------
LOANS = "loans"
USERS = "users"
APPLICATIONS = "applications"
PAYMENTS = "payments"
MESSAGES = "messages"


class MongoClientError(Exception):
    """
    Error while setting up the MongoDB connection.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "MONGO_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class MongoConnection:
    """
    Process-wide holder for the Motor client.

    All methods are class methods for easy access without instantiation.
    The client is created lazily and closed from the application lifespan.
    """

    _instance: AsyncIOMotorClient | None = None

    @classmethod
    def get_client(cls) -> AsyncIOMotorClient:
        """
        Get or create the singleton Motor client.

        Raises:
            MongoClientError: If the connection string is rejected
        """
        if cls._instance is None:
            try:
                cls._instance = AsyncIOMotorClient(settings.mongodb_uri)
                logger.info("MongoDB client initialized successfully")
            except Exception as e:
                raise MongoClientError(
                    message=f"Failed to create MongoDB client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check MONGODB_URI or DB_USER/DB_PASS/DB_HOST in your .env file"
                )
        return cls._instance

    @classmethod
    def get_database(cls) -> AsyncIOMotorDatabase:
        """Return the application database handle."""
        return cls.get_client()[settings.MONGODB_DB_NAME]

    @classmethod
    async def ping(cls) -> None:
        """Round-trip to the server; raises if it is unreachable."""
        await cls.get_client().admin.command("ping")

    @classmethod
    def close(cls) -> None:
        """Close the client and drop the singleton."""
        if cls._instance is not None:
            cls._instance.close()
            cls._instance = None
            logger.info("MongoDB client closed")


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """
    Create the indexes the service relies on.

    - users.email unique: one account per email
    - payments.transactionId unique: a payment is recorded at most once
    """
    await db[USERS].create_index([("email", ASCENDING)], unique=True)
    await db[PAYMENTS].create_index([("transactionId", ASCENDING)], unique=True)
    await db[PAYMENTS].create_index([("applicationId", ASCENDING)])
    await db[APPLICATIONS].create_index([("userEmail", ASCENDING), ("createdAt", DESCENDING)])
    await db[LOANS].create_index([("showOnHome", ASCENDING), ("createdAt", DESCENDING)])
    logger.info("MongoDB indexes ensured")
