# =============================================================================
# core/services/stats_service.py - Dashboard Aggregations
# =============================================================================
# Fixed-shape summary queries for the manager/admin dashboards.
# Each method runs one aggregation pipeline and renames "_id" to a
# meaningful key before returning.
# =============================================================================

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase

from core.models.application import ApplicationStatus
from lib.mongo_client import APPLICATIONS, USERS

logger = logging.getLogger(__name__)

TOP_CATEGORY_LIMIT = 5


class StatsService:
    """Read-model aggregations over applications and users."""

    @staticmethod
    async def application_status_counts(db: AsyncIOMotorDatabase) -> list[dict[str, Any]]:
        """Number of applications per status, largest first."""
        pipeline = [
            {"$group": {"_id": "$status", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
        ]
        rows = await db[APPLICATIONS].aggregate(pipeline).to_list(length=None)
        return [{"status": row["_id"], "count": row["count"]} for row in rows]

    @staticmethod
    async def approved_amounts(db: AsyncIOMotorDatabase) -> dict[str, Any]:
        """Count, total and average loanAmount of approved applications."""
        pipeline = [
            {"$match": {"status": ApplicationStatus.APPROVED.value}},
            {
                "$group": {
                    "_id": None,
                    "approvedCount": {"$sum": 1},
                    "approvedAmount": {"$sum": "$loanAmount"},
                    "averageAmount": {"$avg": "$loanAmount"},
                }
            },
        ]
        rows = await db[APPLICATIONS].aggregate(pipeline).to_list(length=None)
        if not rows:
            return {"approvedCount": 0, "approvedAmount": 0, "averageAmount": 0}

        row = rows[0]
        return {
            "approvedCount": row["approvedCount"],
            "approvedAmount": row["approvedAmount"],
            "averageAmount": row["averageAmount"] or 0,
        }

    @staticmethod
    async def top_categories(db: AsyncIOMotorDatabase) -> list[dict[str, Any]]:
        """The most applied-for loan categories."""
        pipeline = [
            {"$match": {"category": {"$nin": [None, ""]}}},
            {
                "$group": {
                    "_id": "$category",
                    "count": {"$sum": 1},
                    "totalAmount": {"$sum": "$loanAmount"},
                }
            },
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": TOP_CATEGORY_LIMIT},
        ]
        rows = await db[APPLICATIONS].aggregate(pipeline).to_list(length=None)
        return [
            {"category": row["_id"], "count": row["count"], "totalAmount": row["totalAmount"]}
            for row in rows
        ]

    @staticmethod
    async def borrower_approved_totals(
        db: AsyncIOMotorDatabase,
        email: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Approved application count and amount per borrower.

        Args:
            email: Restrict to one borrower
        """
        match: dict[str, Any] = {"status": ApplicationStatus.APPROVED.value}
        if email:
            match["userEmail"] = email.lower()

        pipeline = [
            {"$match": match},
            {
                "$group": {
                    "_id": "$userEmail",
                    "approvedCount": {"$sum": 1},
                    "approvedAmount": {"$sum": "$loanAmount"},
                }
            },
            {"$sort": {"approvedAmount": -1, "_id": 1}},
        ]
        rows = await db[APPLICATIONS].aggregate(pipeline).to_list(length=None)
        return [
            {
                "email": row["_id"],
                "approvedCount": row["approvedCount"],
                "approvedAmount": row["approvedAmount"],
            }
            for row in rows
        ]

    @staticmethod
    async def user_role_counts(db: AsyncIOMotorDatabase) -> list[dict[str, Any]]:
        """Number of users per role."""
        pipeline = [
            {"$group": {"_id": "$role", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
        ]
        rows = await db[USERS].aggregate(pipeline).to_list(length=None)
        return [{"role": row["_id"], "count": row["count"]} for row in rows]
