from marketplace import db
from marketplace.data.base import TimestampedBase


class Notification(TimestampedBase):
    """
    Inbox entry telling an employee that one of their orders awaits a decision.

    The snapshot columns are copied at placement time for display only; the Order row
    stays authoritative. At most one entry exists per order.
    """
    __tablename__ = 'notifications'

    employee_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, unique=True)

    # Snapshot at creation time
    message = db.Column(db.String(512), nullable=False)
    item_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False)
    customer_id = db.Column(db.Integer, nullable=False)
    customer_name = db.Column(db.String(255), nullable=False)
    customer_email = db.Column(db.String(255), nullable=True)

    read_at = db.Column(db.DateTime, nullable=True)

    order = db.relationship('Order', foreign_keys=[order_id])

    def snapshot(self):
        return {
            'message': self.message,
            'order_id': self.order_id,
            'item_name': self.item_name,
            'quantity': self.quantity,
            'status': self.status,
            'customer_id': self.customer_id,
            'customer_name': self.customer_name,
            'customer_email': self.customer_email,
        }

    def __repr__(self):
        return f'<Notification {self.id} order={self.order_id} employee={self.employee_id}>'
