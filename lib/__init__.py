# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains the adapters for external services plus helpers:
# - mongo_client.py: Shared Motor client, collection names, indexes
# - payment_gateway.py: Stripe Checkout wrapper
# - utils.py: ObjectId parsing, document serialization, query helpers
# =============================================================================

from lib.mongo_client import MongoConnection, MongoClientError, ensure_indexes
from lib.payment_gateway import CheckoutSession, StripeGateway
from lib.utils import serialize_document, text_search_filter, to_object_id

__all__ = [
    # MongoDB
    "MongoConnection",
    "MongoClientError",
    "ensure_indexes",
    # Payments
    "CheckoutSession",
    "StripeGateway",
    # Utils
    "serialize_document",
    "text_search_filter",
    "to_object_id",
]
