# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends() and overridden
# in tests via app.dependency_overrides.
# =============================================================================

from typing import Annotated

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from lib.mongo_client import MongoConnection
from lib.payment_gateway import StripeGateway


def get_database() -> AsyncIOMotorDatabase:
    """
    Get the MongoDB database handle.

    The handle is backed by the process-wide pooled client; each awaited
    operation checks a connection out and returns it when done.
    """
    return MongoConnection.get_database()


def get_payment_gateway() -> StripeGateway:
    """Get the payment gateway singleton."""
    return StripeGateway.get_instance()


# Type aliases for dependency injection
DatabaseDep = Annotated[AsyncIOMotorDatabase, Depends(get_database)]
GatewayDep = Annotated[StripeGateway, Depends(get_payment_gateway)]
