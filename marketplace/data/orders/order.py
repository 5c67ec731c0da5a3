from marketplace import db
from marketplace.data.base import TimestampedBase

STATUS_PENDING = 'pending'
STATUS_ACCEPTED = 'accepted'
STATUS_DECLINED = 'declined'
STATUS_COMPLETED = 'completed'
ORDER_STATUSES = (STATUS_PENDING, STATUS_ACCEPTED, STATUS_DECLINED, STATUS_COMPLETED)


class Order(TimestampedBase):
    """
    A customer's request to buy a quantity of one item.

    employee_id is copied from the item at placement so reassigning an item never
    rewrites history. Status only changes through OrderLifecycleEngine.
    """
    __tablename__ = 'orders'

    customer_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    employee_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    item_id = db.Column(db.Integer, db.ForeignKey('items.id'), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING)

    __table_args__ = (
        db.CheckConstraint('quantity >= 1', name='ck_orders_quantity_positive'),
        db.CheckConstraint(
            "status IN ('pending', 'accepted', 'declined', 'completed')",
            name='ck_orders_status',
        ),
    )

    customer = db.relationship('User', foreign_keys=[customer_id])
    employee = db.relationship('User', foreign_keys=[employee_id])
    item = db.relationship('Item', foreign_keys=[item_id])

    def __repr__(self):
        return f'<Order {self.id} item={self.item_id} qty={self.quantity} {self.status}>'
