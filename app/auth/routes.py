# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Signup/login happen client-side against Supabase Auth.
# These routes let a client check its token and fetch the stored account.
# =============================================================================

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_account, get_current_user
from app.auth.models import AuthUser
from app.exceptions import UserNotFoundError
from lib.utils import serialize_document

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me")
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user),
    account: Optional[dict[str, Any]] = Depends(get_current_account),
) -> dict:
    """
    Get the caller's stored account (role, status, display fields).

    Raises:
        401: If not authenticated
        404: If the identity has no account yet (POST /users first)
    """
    if account is None:
        raise UserNotFoundError(user.email)
    return serialize_document(account)


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Useful for checking if a stored token is still valid.
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email,
    }
