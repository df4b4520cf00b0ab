# =============================================================================
# app/routers/payments.py - Application Fee Payment Endpoints
# =============================================================================

from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, Query

from app.auth import Capability, get_current_account, require, scoped_email
from app.dependencies import DatabaseDep, GatewayDep
from core.models.payment import CheckoutRequest, CheckoutResponse
from core.services.payment_service import PaymentService

router = APIRouter()


@router.post("/create-checkout-session", response_model=CheckoutResponse)
async def create_checkout_session(
    request: CheckoutRequest,
    db: DatabaseDep,
    gateway: GatewayDep,
    account: dict[str, Any] = Depends(require(Capability.BORROWER)),
):
    """
    Start paying the application fee.

    Returns the hosted checkout url; the browser is redirected there.
    """
    return await PaymentService.create_checkout(db, gateway, request, account["email"])


@router.patch("/payment-success")
async def confirm_payment(
    db: DatabaseDep,
    gateway: GatewayDep,
    session_id: Annotated[str, Query(min_length=1, description="Checkout session id")],
):
    """
    Confirm a checkout after the success redirect.

    Safe to call repeatedly: the first call records the payment, later
    calls return the same record.
    """
    return await PaymentService.confirm_payment(db, gateway, session_id)


@router.get("/payments")
async def list_payments(
    db: DatabaseDep,
    account: Optional[dict[str, Any]] = Depends(get_current_account),
    email: Annotated[str | None, Query(description="Borrower email")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Page size")] = 10,
    skip: Annotated[int, Query(ge=0, description="Documents to skip")] = 0,
):
    """Payment history; borrowers see only their own."""
    payments, total = await PaymentService.list_payments(
        db,
        email=scoped_email(account, email),
        limit=limit,
        skip=skip,
    )
    return {"payments": payments, "count": total}
