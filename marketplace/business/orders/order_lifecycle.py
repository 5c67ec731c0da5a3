from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from marketplace import db
from marketplace.business.core.identity import RequestIdentity
from marketplace.business.core.outcomes import (
    Conflict,
    Forbidden,
    InvalidState,
    NotFound,
    OrderOutcome,
    Outcome,
    TransientFailure,
)
from marketplace.business.core.validation import parse_int
from marketplace.business.orders.notification_relay import NotificationRelay
from marketplace.business.orders.status_validator import OrderStatusValidator
from marketplace.business.orders.transaction_ledger import TransactionLedger
from marketplace.data.base import utcnow
from marketplace.data.catalog.item import Item
from marketplace.data.orders.order import (
    Order,
    STATUS_ACCEPTED,
    STATUS_COMPLETED,
    STATUS_DECLINED,
    STATUS_PENDING,
)
from marketplace.data.users.user import User
from marketplace.logger import get_logger

logger = get_logger("marketplace.orders.engine")

ALREADY_PROCESSED = "Order already processed."
NOT_ENOUGH_STOCK = "Not enough quantity available."


class OrderLifecycleEngine:
    """
    Places orders and moves them through the order state machine.

    Every mutating operation is one database transaction:
    - stock is taken with a conditional UPDATE (quantity >= n), never read-then-write
    - status changes are compare-and-set on the expected current status
    - notification and ledger rows are written in the same transaction as the order

    Operations return an Outcome; rule violations come back as typed errors and any
    storage error rolls the whole unit back and returns TransientFailure.
    """

    def __init__(
        self,
        *,
        relay: NotificationRelay | None = None,
        ledger: TransactionLedger | None = None,
        enforce_ownership: bool | None = None,
    ):
        self.relay = relay or NotificationRelay()
        self.ledger = ledger or TransactionLedger()
        self._enforce_ownership = enforce_ownership

    @property
    def enforce_ownership(self) -> bool:
        if self._enforce_ownership is not None:
            return self._enforce_ownership
        return bool(current_app.config.get('ENFORCE_ORDER_OWNERSHIP', True))

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def place_order(self, identity: RequestIdentity, item_id, quantity) -> OrderOutcome:
        if not identity.is_customer:
            return Outcome.failure(Forbidden("Only customers can place orders."))

        item_id, error = parse_int(item_id, 'item id', minimum=1)
        if error:
            return Outcome.failure(error)
        quantity, error = parse_int(quantity, 'quantity', minimum=1)
        if error:
            return Outcome.failure(error)

        item = db.session.get(Item, item_id)
        if item is None or not item.is_active:
            return Outcome.failure(NotFound("Item not found."))

        logger.info(f"Processing order request: item {item.id}, requested quantity {quantity}")

        if item.employee_id is None:
            logger.error(f"Item {item.id} has no assigned employee")
            return Outcome.failure(InvalidState("Item does not have an associated employee."))

        if item.quantity < quantity:
            logger.warning(f"Insufficient stock for item {item.id}: available {item.quantity}, requested {quantity}")
            return Outcome.failure(Conflict(NOT_ENOUGH_STOCK))

        employee_id = item.employee_id
        customer = db.session.get(User, identity.user_id)

        try:
            taken = (
                Item.query
                .filter(
                    Item.id == item.id,
                    Item.is_active.is_(True),
                    Item.employee_id == employee_id,
                    Item.quantity >= quantity,
                )
                .update(
                    {Item.quantity: Item.quantity - quantity, Item.updated_at: utcnow()},
                    synchronize_session=False,
                )
            )
            if taken != 1:
                # Another order took the stock between our read and the update
                db.session.rollback()
                logger.warning(f"Lost stock race on item {item_id}: requested {quantity}")
                return Outcome.failure(Conflict(NOT_ENOUGH_STOCK))

            order = Order(
                customer_id=identity.user_id,
                employee_id=employee_id,
                item_id=item.id,
                quantity=quantity,
                status=OrderStatusValidator.INITIAL,
            )
            db.session.add(order)
            db.session.flush()

            self.relay.publish(order, item=item, customer=customer)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Error placing order for item {item_id}")
            return Outcome.failure(TransientFailure("Failed to place order. Please try again later."))

        logger.info(f"Order {order.id} placed by customer {identity.user_id}; employee {employee_id} notified")
        return Outcome.success(order, "Order placed and employee notified!")

    # ------------------------------------------------------------------
    # Employee decisions
    # ------------------------------------------------------------------

    def accept_order(self, identity: RequestIdentity, order_id) -> OrderOutcome:
        return self._decide(identity, order_id, STATUS_ACCEPTED)

    def decline_order(self, identity: RequestIdentity, order_id) -> OrderOutcome:
        return self._decide(identity, order_id, STATUS_DECLINED)

    def accept_notification(self, identity: RequestIdentity, notification_id) -> OrderOutcome:
        return self._decide_via_notification(identity, notification_id, STATUS_ACCEPTED)

    def decline_notification(self, identity: RequestIdentity, notification_id) -> OrderOutcome:
        return self._decide_via_notification(identity, notification_id, STATUS_DECLINED)

    def _decide_via_notification(self, identity: RequestIdentity, notification_id, decision: str) -> OrderOutcome:
        found = self.relay.find_for_employee(identity, notification_id)
        if not found.ok:
            return found
        return self._decide(identity, found.value.order_id, decision)

    def _decide(self, identity: RequestIdentity, order_id, decision: str) -> OrderOutcome:
        verb = 'accept' if decision == STATUS_ACCEPTED else 'decline'
        if not identity.is_employee:
            return Outcome.failure(Forbidden("Only employees can accept or decline orders."))

        order_id, error = parse_int(order_id, 'order id', minimum=1)
        if error:
            return Outcome.failure(error)

        order = db.session.get(Order, order_id)
        if order is None:
            return Outcome.failure(NotFound("Order not found."))

        if self.enforce_ownership and order.employee_id != identity.user_id:
            logger.warning(f"Employee {identity.user_id} tried to {verb} order {order.id} assigned to {order.employee_id}")
            return Outcome.failure(Forbidden("This order is assigned to another employee."))

        if not OrderStatusValidator.can_transition(order.status, decision):
            next_statuses = sorted(OrderStatusValidator.allowed_from(order.status)) or 'none'
            logger.info(f"Refused to {verb} order {order.id}: status is {order.status}, next allowed: {next_statuses}")
            return Outcome.failure(Conflict(ALREADY_PROCESSED))

        try:
            if not self._compare_and_set(order.id, STATUS_PENDING, decision):
                db.session.rollback()
                logger.info(f"Refused to {verb} order {order_id}: status changed concurrently")
                return Outcome.failure(Conflict(ALREADY_PROCESSED))
            self.ledger.record(order, decision)
            self.relay.retire(order.id)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Error trying to {verb} order {order_id}")
            return Outcome.failure(TransientFailure(f"Failed to {verb} the order."))

        logger.info(f"Order {order_id} {decision} by employee {identity.user_id}")
        message = "Order accepted." if decision == STATUS_ACCEPTED else "Order declined."
        return Outcome.success(db.session.get(Order, order_id), message)

    # ------------------------------------------------------------------
    # Customer receipt
    # ------------------------------------------------------------------

    def mark_received(self, identity: RequestIdentity, order_id) -> OrderOutcome:
        order_id, error = parse_int(order_id, 'order id', minimum=1)
        if error:
            return Outcome.failure(error)

        order = db.session.get(Order, order_id)
        if order is None:
            return Outcome.failure(NotFound("Order not found."))

        if order.customer_id != identity.user_id:
            return Outcome.failure(Forbidden("You can only mark your own orders as received."))

        if not OrderStatusValidator.can_transition(order.status, STATUS_COMPLETED):
            state = 'terminal' if OrderStatusValidator.is_terminal(order.status) else 'not yet accepted'
            logger.info(f"Refused receipt of order {order.id}: status {order.status} is {state}")
            return Outcome.failure(Conflict("Only accepted orders can be marked as received."))

        try:
            if not self._compare_and_set(order.id, STATUS_ACCEPTED, STATUS_COMPLETED):
                db.session.rollback()
                return Outcome.failure(Conflict("Only accepted orders can be marked as received."))
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Error marking order {order_id} as received")
            return Outcome.failure(TransientFailure("Failed to mark the order as received."))

        logger.info(f"Order {order_id} marked as received by customer {identity.user_id}")
        return Outcome.success(db.session.get(Order, order_id), "Order marked as received.")

    @staticmethod
    def _compare_and_set(order_id: int, expected: str, new_status: str) -> bool:
        updated = (
            Order.query
            .filter(Order.id == order_id, Order.status == expected)
            .update({Order.status: new_status, Order.updated_at: utcnow()}, synchronize_session=False)
        )
        return updated == 1
