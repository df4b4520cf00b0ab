# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication and capability checks.
#
# Token verification supports both:
# - ES256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret) as fallback
#
# Usage:
#   from app.auth import get_current_user, require, Capability
#
#   @router.post("/loans")
#   async def create_loan(account: dict = Depends(require(Capability.MANAGER))):
#       ...
# =============================================================================

import logging
import time
from typing import Any, Optional
from uuid import UUID

import httpx
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import ValidationError

from app.config import settings
from app.dependencies import DatabaseDep
from app.exceptions import ForbiddenError, UnauthorizedError
from app.auth.models import AuthUser, TokenPayload
from app.auth.permissions import Capability, account_permits
from lib.mongo_client import USERS

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor; missing headers are turned into our own 401
security = HTTPBearer(auto_error=False)

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _get_jwks_url() -> str:
    """Get the JWKS URL from Supabase URL."""
    supabase_url = settings.SUPABASE_URL.rstrip('/')
    return f"{supabase_url}/auth/v1/.well-known/jwks.json"


async def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    jwks_url = _get_jwks_url()
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            response = await client.get(jwks_url)
            response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Stale keys beat no keys
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


async def _get_signing_key(token: str) -> tuple[Any, str]:
    """
    Get the appropriate signing key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    if alg == "HS256":
        return settings.SUPABASE_JWT_SECRET, "HS256"

    if kid:
        jwks = await _fetch_jwks()
        for key in jwks.get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return settings.SUPABASE_JWT_SECRET, "HS256"


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthUser:
    """
    Extract and validate the caller from a Supabase JWT.

    This dependency:
    1. Extracts the Bearer token from the Authorization header
    2. Verifies the JWT signature (supports ES256 and HS256)
    3. Validates expiry and audience
    4. Returns an AuthUser carrying the verified email

    Raises:
        UnauthorizedError: 401 if the header is missing or the token is
            invalid, expired, or carries no email
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("missing bearer token")

    token = credentials.credentials

    try:
        signing_key, algorithm = await _get_signing_key(token)
        claims = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience=settings.JWT_AUDIENCE,
        )
        payload = TokenPayload.model_validate(claims)
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise UnauthorizedError("token expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise UnauthorizedError("invalid token")
    except ValidationError as e:
        logger.warning(f"JWT claims malformed: {e}")
        raise UnauthorizedError("malformed claims")

    if not payload.email:
        logger.warning("JWT token missing 'email' claim")
        raise UnauthorizedError("missing email claim")

    try:
        user_id = UUID(payload.sub)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {payload.sub}")
        raise UnauthorizedError("malformed user id")

    logger.debug(f"Authenticated user: {payload.email}")
    return AuthUser(id=user_id, email=payload.email.lower())


async def get_current_account(
    db: DatabaseDep,
    user: AuthUser = Depends(get_current_user),
) -> Optional[dict[str, Any]]:
    """
    Load the caller's stored User document.

    Returns None when the identity is valid but the person never signed up.
    """
    return await db[USERS].find_one({"email": user.email})


def require(capability: Capability):
    """
    Build a dependency that admits only callers holding `capability`.

    The dependency resolves to the caller's stored User document.

    Usage:
        @router.patch("/users/{user_id}")
        async def update_role(account: dict = Depends(require(Capability.ADMIN))):
            ...
    """

    async def checker(
        account: Optional[dict[str, Any]] = Depends(get_current_account),
    ) -> dict[str, Any]:
        if not account_permits(capability, account):
            email = account.get("email") if account else None
            logger.warning(f"Denied {capability.value} capability to {email}")
            raise ForbiddenError(capability.value)
        return account

    return checker


def scoped_email(account: Optional[dict[str, Any]], requested: Optional[str]) -> Optional[str]:
    """
    Resolve which borrower a read may cover.

    Borrowers are pinned to their own email; approved managers/admins may
    ask for any email or none.

    Raises:
        ForbiddenError: For pending/suspended or unregistered callers
    """
    if account_permits(Capability.BORROWER, account):
        return account["email"]
    if account_permits(Capability.NOT_BORROWER, account):
        return requested
    raise ForbiddenError(Capability.NOT_BORROWER.value)
