# =============================================================================
# core/services/application_service.py - Loan Application Business Logic
# =============================================================================
# Handles application submission, listing and the status lifecycle.
#
# Lifecycle side effects (update_status):
#   approved -> stamp approvedAt
#   rejected -> stamp rejectedAt
#   applied  -> applicationFeeStatus = unpaid, forget earlier checkout
#               sessions, then delete the application's payments so only
#               a fresh checkout can be recorded
# Both writes finish before the updated application is returned.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from app.auth.permissions import Capability, account_permits
from app.exceptions import ApplicationNotFoundError, ForbiddenError
from core.models.application import ApplicationCreate, ApplicationStatus, FeeStatus
from lib.mongo_client import APPLICATIONS, PAYMENTS
from lib.utils import (
    insert_result,
    serialize_document,
    serialize_documents,
    text_search_filter,
    to_object_id,
)

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ["loanTitle", "category", "userEmail"]

# Checkout session ids opened for the current round of an application
CHECKOUT_SESSIONS_FIELD = "checkoutSessionIds"


class ApplicationService:
    """
    Service for loan application operations.

    Provides a clean interface between API routes and the applications
    collection.
    """

    @staticmethod
    async def create_application(
        db: AsyncIOMotorDatabase,
        request: ApplicationCreate,
        user_email: str,
    ) -> dict[str, Any]:
        """
        Submit an application on behalf of the caller.

        Ownership and lifecycle fields are always set server-side, whatever
        the form sent.
        """
        document = request.model_dump()
        document.update(
            userEmail=user_email,
            status=ApplicationStatus.PENDING.value,
            applicationFeeStatus=FeeStatus.UNPAID.value,
            createdAt=datetime.now(timezone.utc),
        )
        for field in ("_id", "approvedAt", "rejectedAt"):
            document.pop(field, None)

        result = await db[APPLICATIONS].insert_one(document)
        logger.info(f"Created application: {result.inserted_id} for {user_email}")
        return insert_result(result)

    @staticmethod
    async def list_applications(
        db: AsyncIOMotorDatabase,
        email: str | None = None,
        status: str | None = None,
        fee_status: str | None = None,
        search: str | None = None,
        limit: int = 10,
        skip: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List applications, newest first.

        Returns:
            Tuple of (applications page, total matching count)
        """
        query: dict[str, Any] = text_search_filter(search, SEARCH_FIELDS)
        if email:
            query["userEmail"] = email.lower()
        if status:
            query["status"] = status
        if fee_status:
            query["applicationFeeStatus"] = fee_status

        total = await db[APPLICATIONS].count_documents(query)
        cursor = (
            db[APPLICATIONS]
            .find(query)
            .sort("createdAt", DESCENDING)
            .skip(skip)
            .limit(limit)
        )
        applications = await cursor.to_list(length=limit)
        return serialize_documents(applications), total

    @staticmethod
    async def get_application(db: AsyncIOMotorDatabase, application_id: str) -> dict[str, Any]:
        """
        Raises:
            ApplicationNotFoundError: If no application has this id
        """
        application = await db[APPLICATIONS].find_one({"_id": to_object_id(application_id)})
        if not application:
            raise ApplicationNotFoundError(application_id)
        return application

    @staticmethod
    async def update_status(
        db: AsyncIOMotorDatabase,
        application_id: str,
        status: ApplicationStatus,
        caller: dict[str, Any] | None,
    ) -> dict[str, Any]:
        """
        Move an application to a new status and apply its side effects.

        Approved managers/admins may set any status. An approved borrower
        may only re-apply (status "applied") on their own application.

        Args:
            application_id: The application id
            status: Target status
            caller: The caller's stored User document

        Returns:
            The updated application

        Raises:
            ApplicationNotFoundError: If the application doesn't exist
            ForbiddenError: If the caller may not make this transition
        """
        object_id = to_object_id(application_id)
        application = await ApplicationService.get_application(db, application_id)

        if not account_permits(Capability.NOT_BORROWER, caller):
            reapplying_own = (
                status == ApplicationStatus.APPLIED
                and account_permits(Capability.BORROWER, caller)
                and application.get("userEmail") == caller.get("email")
            )
            if not reapplying_own:
                raise ForbiddenError(Capability.NOT_BORROWER.value)

        now = datetime.now(timezone.utc)
        changes: dict[str, Any] = {"status": status.value}
        update: dict[str, Any] = {"$set": changes}
        if status == ApplicationStatus.APPROVED:
            changes["approvedAt"] = now
        elif status == ApplicationStatus.REJECTED:
            changes["rejectedAt"] = now
        elif status == ApplicationStatus.APPLIED:
            changes["applicationFeeStatus"] = FeeStatus.UNPAID.value
            update["$unset"] = {CHECKOUT_SESSIONS_FIELD: ""}

        updated = await db[APPLICATIONS].find_one_and_update(
            {"_id": object_id},
            update,
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            # Deleted between the lookup and the update
            raise ApplicationNotFoundError(application_id)

        if status == ApplicationStatus.APPLIED:
            removed = await db[PAYMENTS].delete_many({"applicationId": str(object_id)})
            if removed.deleted_count:
                logger.info(
                    f"Removed {removed.deleted_count} stale payment(s) for application {application_id}"
                )

        logger.info(f"Application {application_id} -> {status.value}")
        return serialize_document(updated)
