# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the LoanLink API:
# - test_models.py: Unit tests for request models and query helpers
# - test_permissions.py: The role/status capability table
# - test_auth.py: Bearer tokens and access guards
# - test_users.py, test_loans.py, test_applications.py,
#   test_payments.py, test_stats.py, test_messages.py,
#   test_health.py: endpoint tests
#
# Run tests with: pytest
# =============================================================================
