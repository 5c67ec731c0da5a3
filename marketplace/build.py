"""
Database build and demo data for the marketplace
"""

import os
from decimal import Decimal

from marketplace import db
from marketplace.logger import get_logger

logger = get_logger("marketplace.build")

DEMO_EMPLOYEE_EMAIL = 'employee@example.com'
DEMO_CUSTOMER_EMAIL = 'customer@example.com'

DEMO_ITEMS = [
    {'name': 'Desk Lamp', 'description': 'Adjustable LED desk lamp', 'quantity': 12, 'price': Decimal('24.99')},
    {'name': 'Notebook', 'description': 'A5 dotted notebook, 120 pages', 'quantity': 40, 'price': Decimal('6.50')},
    {'name': 'Mechanical Pencil', 'description': '0.5 mm, metal body', 'quantity': 25, 'price': Decimal('3.75')},
]


def build_database(seed_demo=False):
    """
    Create all tables and optionally insert demo users and items.

    Must run inside an application context.

    Args:
        seed_demo (bool): Insert a demo employee, customer and items when missing
    """
    # Models must be imported so their tables are part of the metadata
    from marketplace.data.users.user import User  # noqa: F401
    from marketplace.data.catalog.item import Item  # noqa: F401
    from marketplace.data.orders.order import Order  # noqa: F401
    from marketplace.data.orders.notification import Notification  # noqa: F401
    from marketplace.data.orders.order_transaction import OrderTransaction  # noqa: F401

    logger.info("Creating database tables")
    db.create_all()

    if seed_demo:
        seed_demo_data()


def seed_demo_data():
    """Insert demo accounts and items. Existing rows are left alone."""
    from marketplace.data.users.user import User, ROLE_CUSTOMER, ROLE_EMPLOYEE
    from marketplace.data.catalog.item import Item

    password = os.environ.get('DEMO_USER_PASSWORD', 'demo-password-123')

    employee = User.query.filter_by(email=DEMO_EMPLOYEE_EMAIL).first()
    if employee is None:
        employee = User(name='Demo Employee', email=DEMO_EMPLOYEE_EMAIL, role=ROLE_EMPLOYEE)
        employee.set_password(password)
        db.session.add(employee)
        logger.info("Created demo employee")

    customer = User.query.filter_by(email=DEMO_CUSTOMER_EMAIL).first()
    if customer is None:
        customer = User(name='Demo Customer', email=DEMO_CUSTOMER_EMAIL, role=ROLE_CUSTOMER)
        customer.set_password(password)
        db.session.add(customer)
        logger.info("Created demo customer")

    db.session.flush()

    for fields in DEMO_ITEMS:
        if Item.query.filter_by(name=fields['name'], employee_id=employee.id).first() is None:
            db.session.add(Item(employee_id=employee.id, **fields))
            logger.debug(f"Created demo item {fields['name']}")

    db.session.commit()
    logger.info("Demo data ready")
