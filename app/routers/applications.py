# =============================================================================
# app/routers/applications.py - Loan Application Endpoints
# =============================================================================
# Borrowers submit applications and see only their own; approved managers
# and admins see and review all of them. The dashboard aggregations live
# here too since they all read the applications collection.
# =============================================================================

from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, Path, Query

from app.auth import Capability, get_current_account, require, scoped_email
from app.dependencies import DatabaseDep
from core.models.application import (
    ApplicationCreate,
    ApplicationStatus,
    ApplicationStatusUpdate,
    FeeStatus,
)
from core.services.application_service import ApplicationService
from core.services.stats_service import StatsService

router = APIRouter()


@router.post("/loan-applications")
async def create_application(
    request: ApplicationCreate,
    db: DatabaseDep,
    account: dict[str, Any] = Depends(require(Capability.BORROWER)),
):
    """Submit an application. It starts pending with the fee unpaid."""
    return await ApplicationService.create_application(db, request, user_email=account["email"])


@router.get("/loan-applications")
async def list_applications(
    db: DatabaseDep,
    account: Optional[dict[str, Any]] = Depends(get_current_account),
    email: Annotated[str | None, Query(description="Borrower email")] = None,
    status: Annotated[ApplicationStatus | None, Query(description="Filter by status")] = None,
    applicationFeeStatus: Annotated[FeeStatus | None, Query(description="Filter by fee status")] = None,
    search: Annotated[str | None, Query(description="Substring of loan title, category or email")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Page size")] = 10,
    skip: Annotated[int, Query(ge=0, description="Documents to skip")] = 0,
):
    """List applications, newest first, with the total matching count."""
    applications, total = await ApplicationService.list_applications(
        db,
        email=scoped_email(account, email),
        status=status.value if status else None,
        fee_status=applicationFeeStatus.value if applicationFeeStatus else None,
        search=search,
        limit=limit,
        skip=skip,
    )
    return {"applications": applications, "count": total}


@router.patch("/loan-applications/{application_id}")
async def update_application_status(
    application_id: Annotated[str, Path(description="Application id")],
    request: ApplicationStatusUpdate,
    db: DatabaseDep,
    account: Optional[dict[str, Any]] = Depends(get_current_account),
):
    """
    Move an application through its lifecycle.

    - approved / rejected: reviewed by a manager or admin
    - applied: re-application; resets the fee to unpaid and removes the
      old payment, so the borrower must check out again
    """
    return await ApplicationService.update_status(db, application_id, request.status, account)


# =============================================================================
# Aggregations
# =============================================================================

@router.get("/applications/stats/status")
async def application_status_stats(
    db: DatabaseDep,
    account: dict[str, Any] = Depends(require(Capability.NOT_BORROWER)),
):
    return await StatsService.application_status_counts(db)


@router.get("/applications/stats/amounts")
async def application_amount_stats(
    db: DatabaseDep,
    account: dict[str, Any] = Depends(require(Capability.NOT_BORROWER)),
):
    return await StatsService.approved_amounts(db)


@router.get("/applications/stats/top-categories")
async def application_category_stats(
    db: DatabaseDep,
    account: dict[str, Any] = Depends(require(Capability.NOT_BORROWER)),
):
    return await StatsService.top_categories(db)


@router.get("/applications/stats/borrower")
async def borrower_stats(
    db: DatabaseDep,
    account: Optional[dict[str, Any]] = Depends(get_current_account),
    email: Annotated[str | None, Query(description="Borrower email")] = None,
):
    """Approved totals per borrower. Borrowers only ever see their own."""
    return await StatsService.borrower_approved_totals(db, email=scoped_email(account, email))
