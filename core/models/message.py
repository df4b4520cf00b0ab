# =============================================================================
# core/models/message.py - Contact Message Schema
# =============================================================================

from pydantic import BaseModel, ConfigDict


class MessageCreate(BaseModel):
    """Free-form contact message; every field the form sends is kept."""
    model_config = ConfigDict(extra="allow")

    name: str | None = None
    email: str | None = None
    message: str | None = None
