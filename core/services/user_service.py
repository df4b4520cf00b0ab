# =============================================================================
# core/services/user_service.py - User Account Business Logic
# =============================================================================
# Handles signup, lookups, admin role/status changes and self-service
# profile edits. Separates HTTP concerns from database logic.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from app.exceptions import ForbiddenError, UserNotFoundError
from core.models.user import UserCreate, UserProfileUpdate, UserRoleUpdate, UserStatus
from lib.mongo_client import USERS
from lib.utils import (
    insert_result,
    serialize_document,
    serialize_documents,
    text_search_filter,
    to_object_id,
    update_result,
)

logger = logging.getLogger(__name__)

USER_EXISTS_MESSAGE = "User Already Exist"


class UserService:
    """
    Service for user account operations.

    Provides a clean interface between API routes and the users collection.
    """

    @staticmethod
    async def create_user(db: AsyncIOMotorDatabase, request: UserCreate) -> dict[str, Any]:
        """
        Register a new account.

        The account always starts pending. If the email is already taken
        nothing is inserted and an existence message is returned instead.

        Returns:
            Insert acknowledgement, or {"message": "User Already Exist"}
        """
        email = request.email.lower()

        if await db[USERS].find_one({"email": email}):
            logger.info(f"Signup skipped, user exists: {email}")
            return {"message": USER_EXISTS_MESSAGE}

        document = request.model_dump()
        document["email"] = email
        document["status"] = UserStatus.PENDING.value
        document["createdAt"] = datetime.now(timezone.utc)

        try:
            result = await db[USERS].insert_one(document)
        except DuplicateKeyError:
            # Lost a race with a concurrent signup for the same email
            return {"message": USER_EXISTS_MESSAGE}

        logger.info(f"Created user: {result.inserted_id} ({email})")
        return insert_result(result)

    @staticmethod
    async def list_users(
        db: AsyncIOMotorDatabase,
        search: str | None = None,
        role: str | None = None,
        status: str | None = None,
        limit: int = 10,
        skip: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List users, newest first.

        Returns:
            Tuple of (users page, total matching count)
        """
        query: dict[str, Any] = text_search_filter(search, ["displayName", "email"])
        if role:
            query["role"] = role
        if status:
            query["status"] = status

        total = await db[USERS].count_documents(query)
        cursor = (
            db[USERS]
            .find(query)
            .sort("createdAt", DESCENDING)
            .skip(skip)
            .limit(limit)
        )
        users = await cursor.to_list(length=limit)
        return serialize_documents(users), total

    @staticmethod
    async def get_user(db: AsyncIOMotorDatabase, user_id: str) -> dict[str, Any]:
        """
        Get a user by id.

        Raises:
            UserNotFoundError: If no user has this id
        """
        user = await db[USERS].find_one({"_id": to_object_id(user_id)})
        if not user:
            raise UserNotFoundError(user_id)
        return serialize_document(user)

    @staticmethod
    async def get_user_by_email(db: AsyncIOMotorDatabase, email: str) -> dict[str, Any]:
        """
        Get a user by email (used by clients to read role and status).

        Raises:
            UserNotFoundError: If no user has this email
        """
        user = await db[USERS].find_one({"email": email.lower()})
        if not user:
            raise UserNotFoundError(email)
        return serialize_document(user)

    @staticmethod
    async def update_role_status(
        db: AsyncIOMotorDatabase,
        user_id: str,
        request: UserRoleUpdate,
    ) -> dict[str, Any]:
        """Admin update of role and/or status. Absent fields are untouched."""
        changes = request.model_dump(exclude_none=True, mode="json")
        if not changes:
            return {"acknowledged": True, "matchedCount": 0, "modifiedCount": 0}

        result = await db[USERS].update_one({"_id": to_object_id(user_id)}, {"$set": changes})
        logger.info(f"Updated user {user_id}: {changes}")
        return update_result(result)

    @staticmethod
    async def update_profile(
        db: AsyncIOMotorDatabase,
        user_id: str,
        caller_email: str,
        request: UserProfileUpdate,
    ) -> dict[str, Any]:
        """
        Self-service update of displayName/photoURL.

        Raises:
            UserNotFoundError: If no user has this id
            ForbiddenError: If the record belongs to someone else
        """
        object_id = to_object_id(user_id)
        user = await db[USERS].find_one({"_id": object_id})
        if not user:
            raise UserNotFoundError(user_id)
        if user.get("email") != caller_email:
            raise ForbiddenError("self")

        changes = request.model_dump(exclude_none=True)
        if not changes:
            return {"acknowledged": True, "matchedCount": 1, "modifiedCount": 0}

        result = await db[USERS].update_one({"_id": object_id}, {"$set": changes})
        logger.info(f"User {caller_email} updated profile fields {sorted(changes)}")
        return update_result(result)
