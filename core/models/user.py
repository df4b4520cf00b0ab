# =============================================================================
# core/models/user.py - User Schemas
# =============================================================================
# These models define the API contract for user accounts:
# - UserRole / UserStatus: the two axes access control is decided on
# - UserCreate: signup payload (always stored as pending)
# - UserRoleUpdate: admin changes to role/status
# - UserProfileUpdate: self-service display fields
#
# A new account starts pending and only an admin can approve or suspend it.
# =============================================================================

from enum import Enum
from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class UserRole(str, Enum):
    """
    What a user does on the marketplace.

    - borrower: applies for loans and pays application fees
    - manager: publishes loans and reviews applications
    - admin: manages users
    """
    BORROWER = "borrower"
    MANAGER = "manager"
    ADMIN = "admin"


class UserStatus(str, Enum):
    """
    Account approval state.

    Flow: pending -> approved <-> suspended
    """
    PENDING = "pending"
    APPROVED = "approved"
    SUSPENDED = "suspended"


class UserCreate(BaseModel):
    """
    Signup payload.

    Admin accounts cannot be self-registered; status is always set
    server-side.

    Example:
        {
            "email": "rafi@example.com",
            "displayName": "Rafi Ahmed",
            "photoURL": "https://i.ibb.co/abc/rafi.png",
            "role": "borrower"
        }
    """
    email: EmailStr
    displayName: str | None = Field(default=None, max_length=120)
    photoURL: str | None = None
    role: Literal["borrower", "manager"] = "borrower"


class UserRoleUpdate(BaseModel):
    """Admin update of role and/or status."""
    role: UserRole | None = None
    status: UserStatus | None = None


class UserProfileUpdate(BaseModel):
    """Self-service update; only display fields are writable."""
    displayName: str | None = Field(default=None, min_length=1, max_length=120)
    photoURL: str | None = None
