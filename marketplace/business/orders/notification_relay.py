from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from marketplace import db
from marketplace.business.core.identity import RequestIdentity
from marketplace.business.core.outcomes import Forbidden, NotFound, Outcome, TransientFailure
from marketplace.business.core.validation import parse_int
from marketplace.data.base import utcnow
from marketplace.data.orders.notification import Notification
from marketplace.data.orders.order import Order, STATUS_PENDING
from marketplace.logger import get_logger

logger = get_logger("marketplace.orders.notifications")


class NotificationRelay:
    """
    Per-employee inbox of orders awaiting a decision.

    Entries are written and removed inside the same unit of work that changes the
    order, and `pending_for` only returns entries whose order is still pending, so the
    inbox cannot show an order that has already been decided.

    publish/retire do not commit; the caller owns the transaction.
    """

    def publish(self, order: Order, *, item=None, customer=None) -> Notification:
        item = item or order.item
        customer = customer or order.customer
        customer_name = customer.name if customer else 'Unknown'
        item_name = item.name if item else 'Unknown'
        notification = Notification(
            employee_id=order.employee_id,
            order_id=order.id,
            message=f"New order placed by {customer_name} for item {item_name}",
            item_name=item_name,
            quantity=order.quantity,
            status=order.status,
            customer_id=order.customer_id,
            customer_name=customer_name,
            customer_email=customer.email if customer else None,
        )
        db.session.add(notification)
        logger.debug(f"Notification queued for employee {order.employee_id} (order {order.id})")
        return notification

    def retire(self, order_id: int) -> int:
        removed = Notification.query.filter_by(order_id=order_id).delete(synchronize_session=False)
        logger.debug(f"Retired {removed} notification(s) for order {order_id}")
        return removed

    def pending_for(self, employee_id: int) -> list[Notification]:
        return (
            Notification.query
            .join(Order, Notification.order_id == Order.id)
            .filter(Notification.employee_id == employee_id)
            .filter(Order.status == STATUS_PENDING)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

    def find_for_employee(self, identity: RequestIdentity, notification_id: int) -> Outcome:
        """Look up a notification the caller owns; other employees' entries read as missing."""
        if not identity.is_employee:
            return Outcome.failure(Forbidden("Only employees have a notification inbox."))
        notification_id, error = parse_int(notification_id, 'notification id', minimum=1)
        if error:
            return Outcome.failure(error)
        notification = Notification.query.filter_by(
            id=notification_id,
            employee_id=identity.user_id,
        ).first()
        if notification is None:
            return Outcome.failure(NotFound("Notification not found."))
        return Outcome.success(notification)

    def mark_read(self, identity: RequestIdentity, notification_id: int) -> Outcome:
        found = self.find_for_employee(identity, notification_id)
        if not found.ok:
            return found
        notification = found.value
        if notification.read_at is None:
            notification.read_at = utcnow()
            try:
                db.session.commit()
            except SQLAlchemyError:
                db.session.rollback()
                logger.exception(f"Error marking notification {notification_id} as read")
                return Outcome.failure(TransientFailure("Failed to mark the notification as read."))
        return Outcome.success(notification, "Notification marked as read.")

    def reconcile(self) -> dict:
        """
        Bring the inbox back in line with the orders table.

        Creates entries for pending orders that have none and removes entries whose
        order is no longer pending.

        Returns:
            dict: {'created': int, 'removed': int}
        """
        stale = (
            Notification.query
            .join(Order, Notification.order_id == Order.id)
            .filter(Order.status != STATUS_PENDING)
            .all()
        )
        for notification in stale:
            db.session.delete(notification)

        missing = (
            Order.query
            .outerjoin(Notification, Notification.order_id == Order.id)
            .filter(Order.status == STATUS_PENDING)
            .filter(Notification.id.is_(None))
            .all()
        )
        for order in missing:
            self.publish(order)

        db.session.commit()
        logger.info(f"Notification reconcile: {len(missing)} created, {len(stale)} removed")
        return {'created': len(missing), 'removed': len(stale)}
