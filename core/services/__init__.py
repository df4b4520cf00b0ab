# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .user_service import UserService
from .loan_service import LoanService
from .application_service import ApplicationService
from .payment_service import PaymentService
from .message_service import MessageService
from .stats_service import StatsService

__all__ = [
    "UserService",
    "LoanService",
    "ApplicationService",
    "PaymentService",
    "MessageService",
    "StatsService",
]
