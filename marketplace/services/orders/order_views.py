"""
Order View Service
Read-only list views for the customer and employee dashboards.
"""

from typing import Any, Dict, List

from sqlalchemy.orm import joinedload

from marketplace.business.orders.notification_relay import NotificationRelay
from marketplace.business.orders.transaction_ledger import TransactionLedger
from marketplace.data.orders.order import Order, STATUS_ACCEPTED

UNKNOWN = 'Unknown'


def _timestamp(value):
    return value.strftime('%Y-%m-%d %H:%M:%S') if value else None


class OrderViewService:
    """
    Service for order listings.

    Never mutates anything. Names are resolved at read time and fall back to
    'Unknown' when a related row is gone.
    """

    @staticmethod
    def my_orders(customer_id: int) -> List[Dict[str, Any]]:
        """
        Orders placed by a customer, newest first.

        Args:
            customer_id: Customer user ID

        Returns:
            List of order dictionaries with item and employee details
        """
        orders = (
            Order.query
            .options(joinedload(Order.item), joinedload(Order.employee))
            .filter(Order.customer_id == customer_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )
        return [
            {
                'id': order.id,
                'quantity': order.quantity,
                'status': order.status,
                'created_at': _timestamp(order.created_at),
                'item': {
                    'name': order.item.name if order.item else UNKNOWN,
                    'price': str(order.item.price) if order.item else None,
                },
                'employee_name': order.employee.name if order.employee else UNKNOWN,
            }
            for order in orders
        ]

    @staticmethod
    def accepted_orders(employee_id: int) -> List[Dict[str, Any]]:
        """
        Accepted orders assigned to an employee, newest first.

        Args:
            employee_id: Employee user ID

        Returns:
            List of order dictionaries with item and customer names
        """
        orders = (
            Order.query
            .options(joinedload(Order.item), joinedload(Order.customer))
            .filter(Order.employee_id == employee_id, Order.status == STATUS_ACCEPTED)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )
        return [
            {
                'id': order.id,
                'item_name': order.item.name if order.item else UNKNOWN,
                'quantity': order.quantity,
                'status': order.status,
                'created_at': _timestamp(order.created_at),
                'customer_name': order.customer.name if order.customer else UNKNOWN,
            }
            for order in orders
        ]

    @staticmethod
    def pending_notifications(employee_id: int, relay: NotificationRelay = None) -> List[Dict[str, Any]]:
        """
        The employee's inbox: one entry per order still awaiting a decision.

        Args:
            employee_id: Employee user ID
            relay: Notification relay to read from (defaults to a new one)

        Returns:
            List of {'id', 'read_at', 'created_at', 'data'} dictionaries
        """
        relay = relay or NotificationRelay()
        return [
            {
                'id': notification.id,
                'read_at': _timestamp(notification.read_at),
                'created_at': _timestamp(notification.created_at),
                'data': notification.snapshot(),
            }
            for notification in relay.pending_for(employee_id)
        ]

    @staticmethod
    def transaction_history(user_id: int, *, as_employee: bool, ledger: TransactionLedger = None) -> List[Dict[str, Any]]:
        """Ledger rows visible to a user: decisions they made, or decisions on their orders."""
        ledger = ledger or TransactionLedger()
        if as_employee:
            entries = ledger.history_for_employee(user_id)
        else:
            entries = ledger.history_for_customer(user_id)
        return [
            {
                'id': entry.id,
                'order_id': entry.order_id,
                'customer_id': entry.customer_id,
                'item_id': entry.item_id,
                'quantity': entry.quantity,
                'status': entry.status,
                'created_at': _timestamp(entry.created_at),
            }
            for entry in entries
        ]
