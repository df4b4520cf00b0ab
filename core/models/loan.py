# =============================================================================
# core/models/loan.py - Loan Listing Schemas
# =============================================================================
# - LoanCreate: manager publishes a loan product
# - LoanUpdate: partial edit of the listing fields
# - ShowOnHomeUpdate: toggle for the home page carousel
# - LoanSort: whitelisted sort keys for GET /loans
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class LoanSort(str, Enum):
    """
    Sort keys accepted by GET /loans.

    Each maps to a fixed (field, direction) pair in LoanService.
    """
    LATEST = "latest"
    INTEREST_LOW = "interestLow"
    INTEREST_HIGH = "interestHigh"
    LIMIT_LOW = "limitLow"
    LIMIT_HIGH = "limitHigh"


class LoanCreate(BaseModel):
    """
    Schema for publishing a loan.

    Example:
        {
            "title": "Small Business Booster",
            "description": "Working capital for shops",
            "category": "Business",
            "interestRate": 9.5,
            "maxLoanLimit": 50000,
            "emiPlans": ["6 months", "12 months"],
            "image": "https://i.ibb.co/xyz/shop.png",
            "showOnHome": true
        }
    """
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    category: str = Field(..., min_length=1, max_length=80)
    interestRate: float = Field(..., ge=0)
    maxLoanLimit: float = Field(..., gt=0)
    emiPlans: list[str] = Field(default_factory=list)
    image: str | None = None
    showOnHome: bool = False


class LoanUpdate(BaseModel):
    """Partial update; only fields present in the request are written."""
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    category: str | None = Field(default=None, min_length=1, max_length=80)
    interestRate: float | None = Field(default=None, ge=0)
    maxLoanLimit: float | None = Field(default=None, gt=0)
    emiPlans: list[str] | None = None
    image: str | None = None


class ShowOnHomeUpdate(BaseModel):
    showOnHome: bool
