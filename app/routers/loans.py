# =============================================================================
# app/routers/loans.py - Loan Listing Endpoints
# =============================================================================
# Browsing is public. Creating a loan needs an approved manager; editing,
# toggling home-page visibility and deleting need any approved
# non-borrower (manager or admin).
# =============================================================================

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, Capability, get_current_user, require
from app.dependencies import DatabaseDep
from core.models.loan import LoanCreate, LoanSort, LoanUpdate, ShowOnHomeUpdate
from core.services.loan_service import LoanService

router = APIRouter()


@router.post("/loans")
async def create_loan(
    request: LoanCreate,
    db: DatabaseDep,
    account: dict[str, Any] = Depends(require(Capability.MANAGER)),
):
    """Publish a new loan product."""
    return await LoanService.create_loan(db, request, created_by=account["email"])


@router.get("/loans")
async def list_loans(
    db: DatabaseDep,
    search: Annotated[str | None, Query(description="Substring of title, description or category")] = None,
    category: Annotated[str | None, Query(description="Exact category")] = None,
    sort: Annotated[str, Query(description="Sort key")] = LoanSort.LATEST.value,
    limit: Annotated[int, Query(ge=1, le=100, description="Page size")] = 10,
    skip: Annotated[int, Query(ge=0, description="Documents to skip")] = 0,
):
    """
    Browse loans.

    Sort keys: latest, interestLow, interestHigh, limitLow, limitHigh.
    Unknown keys sort by latest.
    """
    loans, total = await LoanService.list_loans(
        db,
        search=search,
        category=category,
        sort=sort,
        limit=limit,
        skip=skip,
    )
    return {"loans": loans, "count": total}


@router.get("/available-loans")
async def list_available_loans(db: DatabaseDep):
    """The six newest loans flagged for the home page."""
    return await LoanService.list_home_loans(db)


@router.get("/loans/{loan_id}")
async def get_loan(
    loan_id: Annotated[str, Path(description="Loan id")],
    db: DatabaseDep,
    user: AuthUser = Depends(get_current_user),
):
    return await LoanService.get_loan(db, loan_id)


@router.patch("/loans/{loan_id}/show-on-home")
async def set_loan_show_on_home(
    loan_id: Annotated[str, Path(description="Loan id")],
    request: ShowOnHomeUpdate,
    db: DatabaseDep,
    account: dict[str, Any] = Depends(require(Capability.NOT_BORROWER)),
):
    return await LoanService.set_show_on_home(db, loan_id, request.showOnHome)


@router.patch("/loans/{loan_id}")
async def update_loan(
    loan_id: Annotated[str, Path(description="Loan id")],
    request: LoanUpdate,
    db: DatabaseDep,
    account: dict[str, Any] = Depends(require(Capability.NOT_BORROWER)),
):
    """Edit loan fields; only the fields sent are changed."""
    return await LoanService.update_loan(db, loan_id, request)


@router.delete("/loans/{loan_id}")
async def delete_loan(
    loan_id: Annotated[str, Path(description="Loan id")],
    db: DatabaseDep,
    account: dict[str, Any] = Depends(require(Capability.NOT_BORROWER)),
):
    return await LoanService.delete_loan(db, loan_id)
