# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Bearer-token authentication (Supabase Auth JWTs) plus the capability
# checks that gate every write route.
#
# Usage:
#   from app.auth import get_current_user, require, Capability, AuthUser
#
#   @router.delete("/loans/{loan_id}")
#   async def delete_loan(account: dict = Depends(require(Capability.NOT_BORROWER))):
#       ...
# =============================================================================

from app.auth.dependencies import get_current_account, get_current_user, require, scoped_email
from app.auth.models import AuthUser
from app.auth.permissions import Capability, account_permits, is_permitted

__all__ = [
    "get_current_account",
    "get_current_user",
    "require",
    "scoped_email",
    "AuthUser",
    "Capability",
    "account_permits",
    "is_permitted",
]
