# =============================================================================
# core/models/payment.py - Payment Schemas
# =============================================================================

from pydantic import BaseModel, Field


class CheckoutRequest(BaseModel):
    """
    Borrower asks for a hosted checkout page for an application fee.

    The amount is not taken from the client; it comes from settings.
    """
    applicationId: str = Field(..., min_length=1)
    loanTitle: str | None = None


class CheckoutResponse(BaseModel):
    url: str
    sessionId: str
