from __future__ import annotations

from marketplace import db
from marketplace.data.orders.order import Order
from marketplace.data.orders.order_transaction import DECISION_STATUSES, OrderTransaction
from marketplace.logger import get_logger

logger = get_logger("marketplace.orders.ledger")


class TransactionLedger:
    """
    Append-only history of accept/decline decisions.

    One row per decided order (unique on order_id). Later order changes, such as
    accepted -> completed, never touch the row.
    """

    def record(self, order: Order, status: str) -> OrderTransaction:
        """Append the decision row. Does not commit; the caller owns the transaction."""
        if status not in DECISION_STATUSES:
            raise ValueError(f"Ledger only records decisions {DECISION_STATUSES}, got {status!r}")
        entry = OrderTransaction(
            order_id=order.id,
            customer_id=order.customer_id,
            item_id=order.item_id,
            quantity=order.quantity,
            status=status,
        )
        db.session.add(entry)
        logger.debug(f"Ledger entry queued: order {order.id} {status}")
        return entry

    def for_order(self, order_id: int) -> list[OrderTransaction]:
        return OrderTransaction.query.filter_by(order_id=order_id).order_by(OrderTransaction.id).all()

    def history_for_employee(self, employee_id: int) -> list[OrderTransaction]:
        return (
            OrderTransaction.query
            .join(Order, OrderTransaction.order_id == Order.id)
            .filter(Order.employee_id == employee_id)
            .order_by(OrderTransaction.created_at.desc(), OrderTransaction.id.desc())
            .all()
        )

    def history_for_customer(self, customer_id: int) -> list[OrderTransaction]:
        return (
            OrderTransaction.query
            .filter_by(customer_id=customer_id)
            .order_by(OrderTransaction.created_at.desc(), OrderTransaction.id.desc())
            .all()
        )
