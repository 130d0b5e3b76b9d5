"""
Domain exceptions raised by the service layer.

Routes never build error responses for these by hand; the handlers in
``routes.errors`` map each class to its HTTP status.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for all business errors."""

    status_code = 500
    default_code = "DOMAIN_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(DomainError):
    """Missing or malformed input."""

    status_code = 400
    default_code = "VALIDATION_ERROR"


class DuplicateResource(DomainError):
    """A unique value (fingerprint, name, email...) is already taken."""

    status_code = 400
    default_code = "DUPLICATE_RESOURCE"


class NotFound(DomainError):
    """The resource does not exist or the caller may not see it."""

    status_code = 404
    default_code = "NOT_FOUND"


class NotAuthorized(DomainError):
    """Caller is neither the owner nor an admin."""

    status_code = 401
    default_code = "NOT_AUTHORIZED"


class Forbidden(DomainError):
    """Authenticated, but the action is not allowed for this caller."""

    status_code = 403
    default_code = "FORBIDDEN"


class BusinessRuleViolation(DomainError):
    status_code = 400
    default_code = "BUSINESS_RULE_VIOLATION"


class InfrastructureError(DomainError):
    """The store failed mid-operation; the unit of work was rolled back."""

    status_code = 500
    default_code = "INFRASTRUCTURE_ERROR"

    def __init__(self, message: str, retryable: bool = False, **kwargs: Any) -> None:
        self.retryable = retryable
        super().__init__(message, **kwargs)


# Specific failures of the booking engine and payment method store

class PaymentMethodRequired(ValidationError):
    default_code = "PAYMENT_METHOD_REQUIRED"


class PastDate(BusinessRuleViolation):
    default_code = "PAST_DATE"


class BookingLimitReached(BusinessRuleViolation):
    default_code = "BOOKING_LIMIT_REACHED"


class CampgroundNotFound(NotFound):
    default_code = "CAMPGROUND_NOT_FOUND"


class DuplicatePaymentMethod(DuplicateResource):
    default_code = "DUPLICATE_PAYMENT_METHOD"
