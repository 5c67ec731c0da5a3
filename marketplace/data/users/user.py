from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from marketplace import db, login_manager
from marketplace.data.base import TimestampedBase

ROLE_CUSTOMER = 'customer'
ROLE_EMPLOYEE = 'employee'
ROLES = (ROLE_CUSTOMER, ROLE_EMPLOYEE)


class User(UserMixin, TimestampedBase):
    __tablename__ = 'users'

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_CUSTOMER)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    __table_args__ = (
        db.CheckConstraint("role IN ('customer', 'employee')", name='ck_users_role'),
    )

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def is_employee(self):
        return self.role == ROLE_EMPLOYEE

    @property
    def is_customer(self):
        return self.role == ROLE_CUSTOMER

    def to_dict(self, skip_fields=None):
        return super().to_dict(skip_fields=list(skip_fields or []) + ['password_hash'])

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))
