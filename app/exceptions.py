# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class LoanLinkException(Exception):
    """
    Base exception for the LoanLink API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "LOANLINK_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Access Exceptions
# =============================================================================
# Clients only look at a single "message" field for these two.

class UnauthorizedError(LoanLinkException):
    """Raised when the bearer token is missing or fails verification."""

    def __init__(self, reason: str | None = None):
        super().__init__(
            message="Unauthorized Access",
            code="UNAUTHORIZED",
            status_code=401,
            details={"reason": reason} if reason else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


class ForbiddenError(LoanLinkException):
    """Raised when a verified caller lacks the role/status for an operation."""

    def __init__(self, capability: str | None = None):
        super().__init__(
            message="Forbidden Access",
            code="FORBIDDEN",
            status_code=403,
            details={"capability": capability} if capability else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


# =============================================================================
# Lookup Exceptions
# =============================================================================

class InvalidObjectIdError(LoanLinkException):
    """Raised when a path/body id is not a valid 24-hex ObjectId."""

    def __init__(self, value: str):
        super().__init__(
            message=f"Invalid id: {value}",
            code="INVALID_ID",
            status_code=400,
            suggestion="Ids are 24-character hexadecimal strings",
            details={"id": value}
        )


class NotFoundError(LoanLinkException):
    """Base class for single-resource lookups that found nothing."""

    def __init__(self, resource: str, key: str):
        super().__init__(
            message=f"{resource.capitalize()} not found: {key}",
            code=f"{resource.upper()}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {resource} identifier is correct",
            details={resource: key}
        )


class LoanNotFoundError(NotFoundError):
    """Raised when a loan id doesn't exist."""

    def __init__(self, loan_id: str):
        super().__init__("loan", loan_id)


class UserNotFoundError(NotFoundError):
    """Raised when a user id or email doesn't exist."""

    def __init__(self, key: str):
        super().__init__("user", key)


class ApplicationNotFoundError(NotFoundError):
    """Raised when a loan application id doesn't exist."""

    def __init__(self, application_id: str):
        super().__init__("application", application_id)


# =============================================================================
# Payment Exceptions
# =============================================================================

class PaymentNotCompletedError(LoanLinkException):
    """Raised when a checkout session is confirmed before it was paid."""

    def __init__(self, session_id: str, payment_status: str | None):
        super().__init__(
            message=f"Payment not completed for session: {session_id}",
            code="PAYMENT_NOT_COMPLETED",
            status_code=400,
            suggestion="Finish the checkout before confirming the payment",
            details={"session_id": session_id, "payment_status": payment_status}
        )


class CheckoutSessionNotCurrentError(LoanLinkException):
    """Raised when a paid session belongs to an earlier round of an application."""

    def __init__(self, session_id: str, application_id: str | None):
        super().__init__(
            message=f"Checkout session {session_id} is not current for application {application_id}",
            code="CHECKOUT_SESSION_NOT_CURRENT",
            status_code=409,
            suggestion="Start a new checkout for this application",
            details={"session_id": session_id, "application_id": application_id}
        )


class ApplicationFeeAlreadyPaidError(LoanLinkException):
    """Raised when checkout is requested for an application that is already paid."""

    def __init__(self, application_id: str):
        super().__init__(
            message=f"Application fee already paid: {application_id}",
            code="FEE_ALREADY_PAID",
            status_code=409,
            suggestion="Re-apply (status 'applied') before paying again",
            details={"application_id": application_id}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def loanlink_exception_handler(
    request: Request,
    exc: LoanLinkException
) -> JSONResponse:
    """
    Convert LoanLinkException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
