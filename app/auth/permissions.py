# =============================================================================
# app/auth/permissions.py - Capability Table
# =============================================================================
# Every guarded route names one capability. Whether a caller has it is a
# pure function of the role and status on their stored User document:
#
#   | Capability   | Roles            | Status   |
#   |--------------|------------------|----------|
#   | ADMIN        | admin            | approved |
#   | MANAGER      | manager          | approved |
#   | BORROWER     | borrower         | approved |
#   | NOT_BORROWER | manager, admin   | approved |
#
# A caller without a stored User document has no capabilities.
# =============================================================================

from enum import Enum
from typing import Any

from core.models.user import UserRole, UserStatus


class Capability(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    BORROWER = "borrower"
    NOT_BORROWER = "not_borrower"


CAPABILITY_ROLES: dict[Capability, frozenset[UserRole]] = {
    Capability.ADMIN: frozenset({UserRole.ADMIN}),
    Capability.MANAGER: frozenset({UserRole.MANAGER}),
    Capability.BORROWER: frozenset({UserRole.BORROWER}),
    Capability.NOT_BORROWER: frozenset({UserRole.MANAGER, UserRole.ADMIN}),
}

REQUIRED_STATUS = UserStatus.APPROVED


def is_permitted(
    capability: Capability,
    role: str | None,
    status: str | None,
) -> bool:
    """
    Decide whether a (role, status) pair grants a capability.

    Unknown roles or statuses never grant anything.

    Example:
        is_permitted(Capability.MANAGER, "manager", "approved")  # True
        is_permitted(Capability.NOT_BORROWER, "admin", "suspended")  # False
    """
    try:
        role_value = UserRole(role)
        status_value = UserStatus(status)
    except ValueError:
        return False
    return status_value == REQUIRED_STATUS and role_value in CAPABILITY_ROLES[capability]


def account_permits(capability: Capability, account: dict[str, Any] | None) -> bool:
    """is_permitted() over a stored User document (or None)."""
    if not account:
        return False
    return is_permitted(capability, account.get("role"), account.get("status"))
