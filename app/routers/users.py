# =============================================================================
# app/routers/users.py - User Account Endpoints
# =============================================================================
# Signup is public; everything else needs a verified bearer token.
# Role/status changes and listings are admin-only.
# =============================================================================

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, Capability, get_current_user, require
from app.dependencies import DatabaseDep
from core.models.user import UserCreate, UserProfileUpdate, UserRole, UserRoleUpdate, UserStatus
from core.services.stats_service import StatsService
from core.services.user_service import UserService

router = APIRouter()


@router.post("/users")
async def create_user(request: UserCreate, db: DatabaseDep):
    """
    Register an account after client-side signup.

    New accounts are pending until an admin approves them. Posting an
    email that already exists returns {"message": "User Already Exist"}
    and inserts nothing.
    """
    return await UserService.create_user(db, request)


@router.get("/users")
async def list_users(
    db: DatabaseDep,
    account: dict[str, Any] = Depends(require(Capability.ADMIN)),
    search: Annotated[str | None, Query(description="Substring of name or email")] = None,
    role: Annotated[UserRole | None, Query(description="Filter by role")] = None,
    status: Annotated[UserStatus | None, Query(description="Filter by status")] = None,
    limit: Annotated[int, Query(ge=1, le=100, description="Page size")] = 10,
    skip: Annotated[int, Query(ge=0, description="Documents to skip")] = 0,
):
    """List accounts with search, role/status filters and pagination."""
    users, total = await UserService.list_users(
        db,
        search=search,
        role=role.value if role else None,
        status=status.value if status else None,
        limit=limit,
        skip=skip,
    )
    return {"users": users, "count": total}


@router.get("/users/{user_id}")
async def get_user(
    user_id: Annotated[str, Path(description="User id")],
    db: DatabaseDep,
    user: AuthUser = Depends(get_current_user),
):
    return await UserService.get_user(db, user_id)


@router.get("/users/{email}/role")
async def get_user_role(
    email: Annotated[str, Path(description="Account email")],
    db: DatabaseDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Get the stored account for an email.

    Clients read `role` and `status` from it to decide which dashboard
    to show.
    """
    return await UserService.get_user_by_email(db, email)


@router.patch("/users/{user_id}")
async def update_user_role(
    user_id: Annotated[str, Path(description="User id")],
    request: UserRoleUpdate,
    db: DatabaseDep,
    account: dict[str, Any] = Depends(require(Capability.ADMIN)),
):
    """Approve, suspend, or change the role of an account."""
    return await UserService.update_role_status(db, user_id, request)


@router.patch("/users-update/{user_id}")
async def update_own_profile(
    user_id: Annotated[str, Path(description="User id")],
    request: UserProfileUpdate,
    db: DatabaseDep,
    user: AuthUser = Depends(get_current_user),
):
    """Update displayName/photoURL on the caller's own account."""
    return await UserService.update_profile(db, user_id, user.email, request)


@router.get("/users-stats/role")
async def user_role_stats(
    db: DatabaseDep,
    account: dict[str, Any] = Depends(require(Capability.ADMIN)),
):
    """Number of accounts per role."""
    return await StatsService.user_role_counts(db)
