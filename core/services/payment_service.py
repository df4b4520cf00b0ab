# =============================================================================
# core/services/payment_service.py - Application Fee Payments
# =============================================================================
# Two steps, both driven by Stripe hosted Checkout:
#
# 1. create_checkout   - borrower gets a hosted payment page for the fee;
#                        the session id is remembered on the application
# 2. confirm_payment   - called after the redirect (possibly more than once):
#                        look the session up, record the Payment at most once,
#                        mark the application's fee as paid
#
# At-most-once rests on the unique index on payments.transactionId:
# the existence check answers repeated callbacks cheaply, and a concurrent
# duplicate that slips past it fails the insert with DuplicateKeyError.
#
# Re-applying clears the remembered session ids, so a session from an
# earlier round can never pay for the current one.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from app.config import settings
from app.exceptions import (
    ApplicationFeeAlreadyPaidError,
    CheckoutSessionNotCurrentError,
    ForbiddenError,
    PaymentNotCompletedError,
)
from core.models.application import ApplicationStatus, FeeStatus
from core.models.payment import CheckoutRequest, CheckoutResponse
from core.services.application_service import CHECKOUT_SESSIONS_FIELD, ApplicationService
from lib.mongo_client import APPLICATIONS, PAYMENTS
from lib.payment_gateway import CheckoutSession, StripeGateway, to_major_units
from lib.utils import serialize_document, serialize_documents, to_object_id

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for application-fee checkout and payment records."""

    @staticmethod
    async def create_checkout(
        db: AsyncIOMotorDatabase,
        gateway: StripeGateway,
        request: CheckoutRequest,
        borrower_email: str,
    ) -> CheckoutResponse:
        """
        Open a hosted checkout for an application's fee.

        Raises:
            ApplicationNotFoundError: If the application doesn't exist
            ForbiddenError: If the application belongs to someone else
            ApplicationFeeAlreadyPaidError: If the fee is already paid
        """
        application = await ApplicationService.get_application(db, request.applicationId)

        if application.get("userEmail") != borrower_email:
            raise ForbiddenError("owner")
        if application.get("applicationFeeStatus") == FeeStatus.PAID.value:
            raise ApplicationFeeAlreadyPaidError(request.applicationId)

        application_id = str(application["_id"])
        loan_title = request.loanTitle or application.get("loanTitle") or "Loan application"

        session = await gateway.create_checkout_session(
            amount_cents=settings.APPLICATION_FEE_CENTS,
            currency=settings.PAYMENT_CURRENCY,
            product_name=f"Application fee: {loan_title}",
            customer_email=borrower_email,
            metadata={"applicationId": application_id, "loanTitle": loan_title},
            success_url=(
                f"{settings.site_domain}/dashboard/payment-success"
                "?session_id={CHECKOUT_SESSION_ID}"
            ),
            cancel_url=f"{settings.site_domain}/dashboard/payment-cancelled",
        )

        await db[APPLICATIONS].update_one(
            {"_id": application["_id"]},
            {"$addToSet": {CHECKOUT_SESSIONS_FIELD: session.id}},
        )
        logger.info(f"Opened checkout {session.id} for application {application_id}")
        return CheckoutResponse(url=session.url or "", sessionId=session.id)

    @staticmethod
    async def confirm_payment(
        db: AsyncIOMotorDatabase,
        gateway: StripeGateway,
        session_id: str,
    ) -> dict[str, Any]:
        """
        Record a completed checkout exactly once.

        Every path that finds the Payment already recorded re-applies the
        application update, so a confirmation interrupted between the two
        writes is completed by the next call.

        Returns:
            {"success", "alreadyRecorded", "transactionId", "payment"}

        Raises:
            PaymentNotCompletedError: If the session is not paid (nothing written)
            CheckoutSessionNotCurrentError: If the session was opened before
                the application was last re-applied (nothing written)
        """
        session = await gateway.retrieve_session(session_id)
        transaction_id = session.payment_intent or session.id

        existing = await db[PAYMENTS].find_one({"transactionId": transaction_id})
        if existing:
            logger.info(f"Payment {transaction_id} already recorded, returning existing record")
            await PaymentService._mark_fee_paid(db, session)
            return PaymentService._confirmation(existing, already_recorded=True)

        if not session.is_paid:
            raise PaymentNotCompletedError(session_id, session.payment_status)

        application_id = session.metadata.get("applicationId")
        if application_id and not await PaymentService._is_current_session(db, session):
            logger.warning(f"Rejected stale checkout {session.id} for application {application_id}")
            raise CheckoutSessionNotCurrentError(session.id, application_id)

        payment = PaymentService._build_payment(session, transaction_id)
        try:
            await db[PAYMENTS].insert_one(payment)
        except DuplicateKeyError:
            existing = await db[PAYMENTS].find_one({"transactionId": transaction_id})
            logger.info(f"Concurrent confirmation for {transaction_id}, keeping first record")
            await PaymentService._mark_fee_paid(db, session)
            return PaymentService._confirmation(existing, already_recorded=True)

        await PaymentService._mark_fee_paid(db, session)

        logger.info(f"Recorded payment {transaction_id} for application {application_id}")
        return PaymentService._confirmation(payment, already_recorded=False)

    @staticmethod
    async def list_payments(
        db: AsyncIOMotorDatabase,
        email: str | None = None,
        limit: int = 10,
        skip: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        """Payments newest first, optionally for one borrower."""
        query: dict[str, Any] = {}
        if email:
            query["borrowerEmail"] = email.lower()

        total = await db[PAYMENTS].count_documents(query)
        cursor = (
            db[PAYMENTS]
            .find(query)
            .sort("paidAt", DESCENDING)
            .skip(skip)
            .limit(limit)
        )
        payments = await cursor.to_list(length=limit)
        return serialize_documents(payments), total

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    async def _is_current_session(db: AsyncIOMotorDatabase, session: CheckoutSession) -> bool:
        application_id = session.metadata.get("applicationId")
        application = await db[APPLICATIONS].find_one(
            {"_id": to_object_id(application_id), CHECKOUT_SESSIONS_FIELD: session.id},
            {"_id": 1},
        )
        return application is not None

    @staticmethod
    async def _mark_fee_paid(db: AsyncIOMotorDatabase, session: CheckoutSession) -> None:
        """Set fee paid + status pending, only while the session is still current."""
        application_id = session.metadata.get("applicationId")
        if not application_id:
            return
        result = await db[APPLICATIONS].update_one(
            {
                "_id": to_object_id(application_id),
                CHECKOUT_SESSIONS_FIELD: session.id,
                "applicationFeeStatus": {"$ne": FeeStatus.PAID.value},
            },
            {
                "$set": {
                    "applicationFeeStatus": FeeStatus.PAID.value,
                    "status": ApplicationStatus.PENDING.value,
                }
            },
        )
        if result.modified_count:
            logger.info(f"Application {application_id} fee marked paid")

    @staticmethod
    def _build_payment(session: CheckoutSession, transaction_id: str) -> dict[str, Any]:
        return {
            "amount": to_major_units(session.amount_total or 0, session.currency),
            "currency": session.currency,
            "borrowerEmail": (session.customer_email or "").lower() or None,
            "applicationId": session.metadata.get("applicationId"),
            "loanTitle": session.metadata.get("loanTitle"),
            "transactionId": transaction_id,
            "paymentStatus": session.payment_status,
            "paidAt": datetime.now(timezone.utc),
        }

    @staticmethod
    def _confirmation(payment: dict[str, Any], already_recorded: bool) -> dict[str, Any]:
        return {
            "success": True,
            "alreadyRecorded": already_recorded,
            "transactionId": payment["transactionId"],
            "payment": serialize_document(payment),
        }
