# =============================================================================
# lib/payment_gateway.py - Stripe Checkout Wrapper
# =============================================================================
# Thin async wrapper over Stripe hosted Checkout.
# The service only needs two things from the gateway:
# - create a checkout session for the application fee
# - look a session up again to learn whether it was paid
#
# Usage:
#   from lib.payment_gateway import StripeGateway
#   gateway = StripeGateway.get_instance()
#   session = await gateway.retrieve_session("cs_test_...")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import stripe
from pydantic import BaseModel, Field

from app.config import settings

logger = logging.getLogger(__name__)

# Currencies Stripe charges in whole units (no minor unit)
ZERO_DECIMAL_CURRENCIES = frozenset({
    "bif", "clp", "djf", "gnf", "jpy", "kmf", "krw", "mga",
    "pyg", "rwf", "ugx", "vnd", "vuv", "xaf", "xof", "xpf",
})


def to_major_units(amount: int, currency: str | None) -> float:
    """
    Convert a Stripe amount (smallest currency unit) to major units.

    Example:
        to_major_units(1000, "usd")  # 10.0
        to_major_units(1000, "jpy")  # 1000.0
    """
    if (currency or "").lower() in ZERO_DECIMAL_CURRENCIES:
        return float(amount)
    return amount / 100


class CheckoutSession(BaseModel):
    """
    The fields of a Stripe Checkout Session this service reads.

    payment_intent is the transaction id recorded on Payment documents.
    """
    id: str
    url: str | None = None
    payment_status: str | None = None
    payment_intent: str | None = None
    amount_total: int | None = None
    currency: str | None = None
    customer_email: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"

    @classmethod
    def from_stripe(cls, session: Any) -> "CheckoutSession":
        """Build from a stripe.checkout.Session object."""
        customer_email = getattr(session, "customer_email", None)
        details = getattr(session, "customer_details", None)
        if not customer_email and details is not None:
            customer_email = getattr(details, "email", None)

        # Unexpanded it is the PaymentIntent id, expanded it is the object
        payment_intent = getattr(session, "payment_intent", None)
        if payment_intent is not None and not isinstance(payment_intent, str):
            payment_intent = payment_intent.id

        metadata = getattr(session, "metadata", None)
        if metadata is not None and hasattr(metadata, "to_dict"):
            metadata = metadata.to_dict()

        return cls(
            id=session.id,
            url=getattr(session, "url", None),
            payment_status=getattr(session, "payment_status", None),
            payment_intent=payment_intent,
            amount_total=getattr(session, "amount_total", None),
            currency=getattr(session, "currency", None),
            customer_email=customer_email,
            metadata=dict(metadata or {}),
        )


class StripeGateway:
    """
    Payment gateway backed by Stripe Checkout.

    One instance per process; the underlying StripeClient uses httpx so
    both calls are awaited instead of blocking the event loop.
    """

    _instance: StripeGateway | None = None

    def __init__(self, api_key: str):
        self._client = stripe.StripeClient(
            api_key,
            http_client=stripe.HTTPXClient(),
        )

    @classmethod
    def get_instance(cls) -> StripeGateway:
        """Get or create the singleton gateway."""
        if cls._instance is None:
            cls._instance = cls(settings.STRIPE_SECRET_KEY)
            logger.info("Stripe gateway initialized")
        return cls._instance

    async def create_checkout_session(
        self,
        *,
        amount_cents: int,
        currency: str,
        product_name: str,
        customer_email: str,
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        """
        Create a one-item hosted checkout session.

        Args:
            amount_cents: Price in the smallest currency unit
            currency: ISO currency code
            product_name: Line item label shown on the checkout page
            customer_email: Prefilled payer email
            metadata: Echoed back on retrieval (application id, loan title)
            success_url: Redirect after payment; may contain {CHECKOUT_SESSION_ID}
            cancel_url: Redirect when the payer backs out

        Returns:
            CheckoutSession with the hosted page url
        """
        session = await self._client.v1.checkout.sessions.create_async(
            params={
                "mode": "payment",
                "line_items": [
                    {
                        "price_data": {
                            "currency": currency,
                            "unit_amount": amount_cents,
                            "product_data": {"name": product_name},
                        },
                        "quantity": 1,
                    }
                ],
                "customer_email": customer_email,
                "metadata": metadata,
                "success_url": success_url,
                "cancel_url": cancel_url,
            }
        )
        logger.info(f"Created checkout session {session.id} for {customer_email}")
        return CheckoutSession.from_stripe(session)

    async def retrieve_session(self, session_id: str) -> CheckoutSession:
        """Look up a checkout session by id."""
        session = await self._client.v1.checkout.sessions.retrieve_async(session_id)
        return CheckoutSession.from_stripe(session)
