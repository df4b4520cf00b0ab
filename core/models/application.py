# =============================================================================
# core/models/application.py - Loan Application Schemas
# =============================================================================
# These models define the API contract for loan applications:
# - ApplicationStatus: review lifecycle
# - FeeStatus: whether the one-time application fee is paid
# - ApplicationCreate: borrower submits an application
# - ApplicationStatusUpdate: lifecycle transition request
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ApplicationStatus(str, Enum):
    """
    Review state of an application.

    State machine:
        pending -> applied -> approved
                          +-> rejected
        approved/rejected -> applied   (re-application)

    - pending: submitted, or fee paid and waiting for review
    - applied: waiting for the application fee
    - approved / rejected: reviewed by a manager
    """
    PENDING = "pending"
    APPLIED = "applied"
    APPROVED = "approved"
    REJECTED = "rejected"


class FeeStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class ApplicationCreate(BaseModel):
    """
    Schema for submitting a loan application.

    The loan snapshot (title, category, interestRate) is copied onto the
    application so reports survive later edits to the loan. Any extra
    applicant details sent by the form are stored as-is.

    Example:
        {
            "loanId": "6563b5f4e1a2c3d4e5f60718",
            "loanTitle": "Small Business Booster",
            "category": "Business",
            "interestRate": 9.5,
            "loanAmount": 12000,
            "firstName": "Rafi",
            "lastName": "Ahmed",
            "contactNumber": "+8801700000000",
            "monthlyIncome": 1500,
            "reason": "Restock inventory"
        }
    """
    model_config = ConfigDict(extra="allow")

    loanId: str = Field(..., min_length=1)
    loanTitle: str | None = None
    category: str | None = None
    interestRate: float | None = Field(default=None, ge=0)
    loanAmount: float = Field(..., gt=0)


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
