from enum import Enum

from shared.errors import InvalidStatusTransitionError


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    UPI = "upi"
    NET_BANKING = "net_banking"
    COD = "cod"


# Forward-only. cancelled and refunded are terminal.
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset(
        {OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED}
    ),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}


def can_transition(current: str, new: str) -> bool:
    try:
        current_status, new_status = OrderStatus(current), OrderStatus(new)
    except ValueError:
        return False
    return new_status in ALLOWED_TRANSITIONS[current_status]


def ensure_transition(current: str, new) -> OrderStatus:
    """Return ``new`` as an OrderStatus, or raise if the move isn't allowed."""
    requested = new.value if isinstance(new, OrderStatus) else str(new)
    if not can_transition(current, requested):
        raise InvalidStatusTransitionError(current, requested)
    return OrderStatus(requested)
