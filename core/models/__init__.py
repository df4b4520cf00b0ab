# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for request validation:
# - user.py: Account roles, statuses and update payloads
# - loan.py: Loan listing payloads and sort keys
# - application.py: Application lifecycle and submission payloads
# - payment.py: Checkout request/response
# - message.py: Contact messages
#
# These models define the "contract" between API and clients.
# =============================================================================

from .user import (
    UserCreate,
    UserProfileUpdate,
    UserRole,
    UserRoleUpdate,
    UserStatus,
)

from .loan import (
    LoanCreate,
    LoanSort,
    LoanUpdate,
    ShowOnHomeUpdate,
)

from .application import (
    ApplicationCreate,
    ApplicationStatus,
    ApplicationStatusUpdate,
    FeeStatus,
)

from .payment import (
    CheckoutRequest,
    CheckoutResponse,
)

from .message import MessageCreate

__all__ = [
    # User
    "UserCreate",
    "UserProfileUpdate",
    "UserRole",
    "UserRoleUpdate",
    "UserStatus",
    # Loan
    "LoanCreate",
    "LoanSort",
    "LoanUpdate",
    "ShowOnHomeUpdate",
    # Application
    "ApplicationCreate",
    "ApplicationStatus",
    "ApplicationStatusUpdate",
    "FeeStatus",
    # Payment
    "CheckoutRequest",
    "CheckoutResponse",
    # Message
    "MessageCreate",
]
