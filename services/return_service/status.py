from enum import Enum

from shared.errors import InvalidStatusTransitionError


class ReturnStatus(str, Enum):
    REQUESTED = "requested"
    APPROVED = "approved"
    REJECTED = "rejected"
    RECEIVED = "received"
    PROCESSED = "processed"
    REFUNDED = "refunded"


class ReturnReason(str, Enum):
    DEFECTIVE = "defective"
    WRONG_ITEM = "wrong_item"
    NOT_AS_DESCRIBED = "not_as_described"
    CHANGED_MIND = "changed_mind"
    DAMAGED = "damaged"
    OTHER = "other"


# rejected and refunded are terminal
ALLOWED_TRANSITIONS: dict[ReturnStatus, frozenset[ReturnStatus]] = {
    ReturnStatus.REQUESTED: frozenset({ReturnStatus.APPROVED, ReturnStatus.REJECTED}),
    ReturnStatus.APPROVED: frozenset({ReturnStatus.RECEIVED}),
    ReturnStatus.RECEIVED: frozenset({ReturnStatus.PROCESSED}),
    ReturnStatus.PROCESSED: frozenset({ReturnStatus.REFUNDED}),
    ReturnStatus.REJECTED: frozenset(),
    ReturnStatus.REFUNDED: frozenset(),
}

CLOSED_STATUSES = (ReturnStatus.REJECTED.value, ReturnStatus.REFUNDED.value)


def ensure_return_transition(current: str, new: ReturnStatus) -> ReturnStatus:
    if new not in ALLOWED_TRANSITIONS[ReturnStatus(current)]:
        raise InvalidStatusTransitionError(current, new.value, subject="return")
    return new
