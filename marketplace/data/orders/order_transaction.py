from sqlalchemy import event

from marketplace import db
from marketplace.data.base import TimestampedBase

DECISION_STATUSES = ('accepted', 'declined')


class OrderTransaction(TimestampedBase):
    """Append-only audit row for one accept/decline decision"""
    __tablename__ = 'transactions'

    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, unique=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    item_id = db.Column(db.Integer, db.ForeignKey('items.id'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False)

    __table_args__ = (
        db.CheckConstraint("status IN ('accepted', 'declined')", name='ck_transactions_status'),
    )

    order = db.relationship('Order', foreign_keys=[order_id])

    def __repr__(self):
        return f'<OrderTransaction order={self.order_id} {self.status}>'


@event.listens_for(OrderTransaction, 'before_update')
def _reject_update(mapper, connection, target):
    raise RuntimeError(f"Transaction for order {target.order_id} is append-only and cannot be modified")


@event.listens_for(OrderTransaction, 'before_delete')
def _reject_delete(mapper, connection, target):
    raise RuntimeError(f"Transaction for order {target.order_id} is append-only and cannot be deleted")
