# =============================================================================
# core/services/loan_service.py - Loan Listing Business Logic
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from app.exceptions import LoanNotFoundError
from core.models.loan import LoanCreate, LoanSort, LoanUpdate
from lib.mongo_client import LOANS
from lib.utils import (
    delete_result,
    insert_result,
    serialize_document,
    serialize_documents,
    text_search_filter,
    to_object_id,
    update_result,
)

logger = logging.getLogger(__name__)

# Whitelisted sort keys -> MongoDB sort spec
SORT_SPECS: dict[LoanSort, list[tuple[str, int]]] = {
    LoanSort.LATEST: [("createdAt", DESCENDING)],
    LoanSort.INTEREST_LOW: [("interestRate", ASCENDING), ("createdAt", DESCENDING)],
    LoanSort.INTEREST_HIGH: [("interestRate", DESCENDING), ("createdAt", DESCENDING)],
    LoanSort.LIMIT_LOW: [("maxLoanLimit", ASCENDING), ("createdAt", DESCENDING)],
    LoanSort.LIMIT_HIGH: [("maxLoanLimit", DESCENDING), ("createdAt", DESCENDING)],
}

SEARCH_FIELDS = ["title", "description", "category"]

HOME_PAGE_LIMIT = 6


def resolve_sort(sort: str | LoanSort | None) -> LoanSort:
    """Map a requested sort key onto the whitelist, defaulting to latest."""
    try:
        return LoanSort(sort)
    except ValueError:
        return LoanSort.LATEST


class LoanService:
    """Service for loan listing operations."""

    @staticmethod
    async def create_loan(
        db: AsyncIOMotorDatabase,
        request: LoanCreate,
        created_by: str,
    ) -> dict[str, Any]:
        document = request.model_dump()
        document["createdAt"] = datetime.now(timezone.utc)
        document["createdBy"] = created_by

        result = await db[LOANS].insert_one(document)
        logger.info(f"Created loan: {result.inserted_id} by {created_by}")
        return insert_result(result)

    @staticmethod
    async def list_loans(
        db: AsyncIOMotorDatabase,
        search: str | None = None,
        category: str | None = None,
        sort: str | LoanSort = LoanSort.LATEST,
        limit: int = 10,
        skip: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Filtered, sorted page of loans.

        Args:
            search: Case-insensitive substring over title/description/category
            category: Exact category match
            sort: A LoanSort key; anything else means latest
            limit: Page size
            skip: Documents to skip

        Returns:
            Tuple of (loans page, total matching count)
        """
        query: dict[str, Any] = text_search_filter(search, SEARCH_FIELDS)
        if category:
            query["category"] = category

        total = await db[LOANS].count_documents(query)
        cursor = (
            db[LOANS]
            .find(query)
            .sort(SORT_SPECS[resolve_sort(sort)])
            .skip(skip)
            .limit(limit)
        )
        loans = await cursor.to_list(length=limit)
        return serialize_documents(loans), total

    @staticmethod
    async def list_home_loans(db: AsyncIOMotorDatabase) -> list[dict[str, Any]]:
        """The newest loans flagged for the home page."""
        cursor = (
            db[LOANS]
            .find({"showOnHome": True})
            .sort("createdAt", DESCENDING)
            .limit(HOME_PAGE_LIMIT)
        )
        return serialize_documents(await cursor.to_list(length=HOME_PAGE_LIMIT))

    @staticmethod
    async def get_loan(db: AsyncIOMotorDatabase, loan_id: str) -> dict[str, Any]:
        """
        Raises:
            LoanNotFoundError: If no loan has this id
        """
        loan = await db[LOANS].find_one({"_id": to_object_id(loan_id)})
        if not loan:
            raise LoanNotFoundError(loan_id)
        return serialize_document(loan)

    @staticmethod
    async def update_loan(
        db: AsyncIOMotorDatabase,
        loan_id: str,
        request: LoanUpdate,
    ) -> dict[str, Any]:
        """Write only the fields present in the request."""
        changes = request.model_dump(exclude_unset=True)
        if not changes:
            return {"acknowledged": True, "matchedCount": 0, "modifiedCount": 0}

        result = await db[LOANS].update_one({"_id": to_object_id(loan_id)}, {"$set": changes})
        logger.info(f"Updated loan {loan_id}: {sorted(changes)}")
        return update_result(result)

    @staticmethod
    async def set_show_on_home(
        db: AsyncIOMotorDatabase,
        loan_id: str,
        show_on_home: bool,
    ) -> dict[str, Any]:
        result = await db[LOANS].update_one(
            {"_id": to_object_id(loan_id)},
            {"$set": {"showOnHome": show_on_home}},
        )
        return update_result(result)

    @staticmethod
    async def delete_loan(db: AsyncIOMotorDatabase, loan_id: str) -> dict[str, Any]:
        result = await db[LOANS].delete_one({"_id": to_object_id(loan_id)})
        logger.info(f"Deleted loan {loan_id} (deleted={result.deleted_count})")
        return delete_result(result)
