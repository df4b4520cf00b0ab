# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by resource:
# - health.py: Health check endpoints
# - users.py: Signup, account lookups, admin role/status changes
# - loans.py: Loan listings
# - applications.py: Loan applications, lifecycle and dashboard stats
# - payments.py: Application fee checkout and confirmation
# - messages.py: Contact messages
#
# Each router is mounted in main.py.
# =============================================================================

from . import health
from . import users
from . import loans
from . import applications
from . import payments
from . import messages

__all__ = [
    "health",
    "users",
    "loans",
    "applications",
    "payments",
    "messages",
]
