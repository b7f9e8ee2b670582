"""Domain exceptions shared by the storefront services.

Services raise these; routers translate them into HTTP responses.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    pass


class ValidationError(StorefrontError):
    """Raised when input is rejected before anything is written."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class CheckoutValidationError(ValidationError):
    """Raised when a checkout attempt fails pre-order validation."""

    pass


class CouponError(ValidationError):
    """Raised when a coupon cannot be applied to an order."""

    def __init__(self, code: str, reason: str):
        self.code = code
        self.reason = reason
        super().__init__(f"Coupon '{code}' cannot be applied: {reason}", field="coupon_code")


class NotFoundError(StorefrontError):
    """Raised when a row looked up by id doesn't exist."""

    def __init__(self, resource: str, resource_id):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found: {resource_id}")


class InvalidStatusTransitionError(StorefrontError):
    """Raised when a status change is not in the transition table."""

    def __init__(self, current: str, requested: str, subject: str = "order"):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move {subject} from '{current}' to '{requested}'")


class PaymentDeclinedError(StorefrontError):
    """Raised inside checkout when the gateway reports a failed payment."""

    def __init__(self, message: str):
        super().__init__(message or "Payment processing failed")


class PersistenceError(StorefrontError):
    """Raised when a write to the database fails mid-sequence."""

    def __init__(self, step: str, cause: Exception | None = None):
        self.step = step
        self.cause = cause
        super().__init__(f"Persistence failure during '{step}'")
