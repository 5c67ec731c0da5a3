from __future__ import annotations

from marketplace.data.orders.order import (
    STATUS_ACCEPTED,
    STATUS_COMPLETED,
    STATUS_DECLINED,
    STATUS_PENDING,
)


class OrderStatusValidator:
    """
    Order state machine.

        pending -> accepted -> completed
        pending -> declined

    declined and completed are terminal. Unknown statuses have no transitions.
    """

    INITIAL = STATUS_PENDING

    _NEXT = {
        STATUS_PENDING: {STATUS_ACCEPTED, STATUS_DECLINED},
        STATUS_ACCEPTED: {STATUS_COMPLETED},
        STATUS_DECLINED: set(),
        STATUS_COMPLETED: set(),
    }

    @classmethod
    def can_transition(cls, current_status: str, new_status: str) -> bool:
        return new_status in cls._NEXT.get(current_status, set())

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return not cls._NEXT.get(status)

    @classmethod
    def allowed_from(cls, status: str) -> frozenset[str]:
        return frozenset(cls._NEXT.get(status, set()))
