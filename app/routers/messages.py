# =============================================================================
# app/routers/messages.py - Contact Message Endpoints
# =============================================================================

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from app.auth import Capability, require
from app.dependencies import DatabaseDep
from core.models.message import MessageCreate
from core.services.message_service import MessageService

router = APIRouter()


@router.post("/messages")
async def create_message(request: MessageCreate, db: DatabaseDep):
    """Store a contact-form message. No sign-in needed."""
    return await MessageService.create_message(db, request)


@router.get("/messages")
async def list_messages(
    db: DatabaseDep,
    account: dict[str, Any] = Depends(require(Capability.ADMIN)),
    limit: Annotated[int, Query(ge=1, le=100, description="Page size")] = 20,
    skip: Annotated[int, Query(ge=0, description="Documents to skip")] = 0,
):
    messages, total = await MessageService.list_messages(db, limit=limit, skip=skip)
    return {"messages": messages, "count": total}
