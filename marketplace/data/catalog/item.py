from marketplace import db
from marketplace.data.base import TimestampedBase


class Item(TimestampedBase):
    """
    A sellable good with finite stock.

    `employee_id` is nullable: an item whose owner account is removed stays on record
    but can no longer be ordered. Deleting an item only delists it (is_active=False) so
    historical orders keep resolving their item.
    """
    __tablename__ = 'items'

    employee_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    quantity = db.Column(db.Integer, nullable=False, default=0)
    price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    image = db.Column(db.String(512), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    __table_args__ = (
        db.CheckConstraint('quantity >= 0', name='ck_items_quantity_non_negative'),
        db.CheckConstraint('price >= 0', name='ck_items_price_non_negative'),
    )

    employee = db.relationship('User', foreign_keys=[employee_id])

    def __repr__(self):
        return f'<Item {self.id} {self.name!r} qty={self.quantity}>'
