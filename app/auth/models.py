# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated caller extracted from a Supabase JWT.

    This is the minimal identity available from the token itself.
    Role and status live on the stored User document and are looked up
    by email when a capability check runs.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: str


class TokenPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.

    Supabase tokens include standard JWT claims plus custom claims.
    """
    sub: str  # User ID
    email: Optional[str] = None
    aud: str  # Audience (should be "authenticated")
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    role: Optional[str] = None  # Supabase role, unrelated to marketplace role
