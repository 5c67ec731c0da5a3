"""
Pytest configuration and fixtures for the marketplace tests
"""
import os
import tempfile
from decimal import Decimal

import pytest

os.environ.setdefault('SECRET_KEY', 'test_secret_key_for_marketplace_tests')
os.environ.setdefault('LOG_DIR', tempfile.mkdtemp(prefix='marketplace-logs-'))
os.environ.setdefault('LOG_LEVEL', 'WARNING')
os.environ.pop('DATABASE_URL', None)

from marketplace import create_app  # noqa: E402
from marketplace import db as _db  # noqa: E402
from marketplace.business.core.identity import RequestIdentity  # noqa: E402
from marketplace.data.catalog.item import Item  # noqa: E402
from marketplace.data.users.user import ROLE_CUSTOMER, ROLE_EMPLOYEE, User  # noqa: E402

PASSWORD = 'password123'


@pytest.fixture(scope='function')
def app(tmp_path):
    """Flask application on a fresh SQLite file per test"""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'marketplace_test.db'}",
        'WTF_CSRF_ENABLED': False,
        'RATELIMIT_ENABLED': False,
        'SESSION_COOKIE_SECURE': False,
        'REMEMBER_COOKIE_SECURE': False,
    })

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def db(app):
    return _db


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


def make_user(name, role, email=None):
    user = User(name=name, email=email or f"{name.lower().replace(' ', '.')}@example.com", role=role)
    user.set_password(PASSWORD)
    _db.session.add(user)
    _db.session.commit()
    return user


def make_item(employee, quantity=5, price='9.99', name='Widget'):
    item = Item(
        employee_id=employee.id if employee is not None else None,
        name=name,
        description=f'{name} for testing',
        quantity=quantity,
        price=Decimal(price),
    )
    _db.session.add(item)
    _db.session.commit()
    return item


def identity_of(user):
    return RequestIdentity.from_user(user)


def login_user(client, user, password=PASSWORD):
    """Helper function to log a user in through the API"""
    return client.post('/login', json={'email': user.email, 'password': password})


@pytest.fixture
def employee(app):
    return make_user('Erin Employee', ROLE_EMPLOYEE)


@pytest.fixture
def other_employee(app):
    return make_user('Oscar Employee', ROLE_EMPLOYEE)


@pytest.fixture
def customer(app):
    return make_user('Cara Customer', ROLE_CUSTOMER)


@pytest.fixture
def other_customer(app):
    return make_user('Dan Customer', ROLE_CUSTOMER)


@pytest.fixture
def item(employee):
    return make_item(employee, quantity=5)
