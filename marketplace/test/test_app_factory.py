"""
Application factory, configuration and database build
"""
import pytest

from marketplace import create_app
from marketplace.build import DEMO_ITEMS, build_database
from marketplace.data.catalog.item import Item
from marketplace.data.users.user import User
from marketplace.logger import get_logger


def test_secret_key_is_required(monkeypatch):
    monkeypatch.delenv('SECRET_KEY', raising=False)
    with pytest.raises(RuntimeError):
        create_app({'SQLALCHEMY_DATABASE_URI': 'sqlite://'})


def test_sqlite_engine_waits_on_locks(app):
    connect_args = app.config['SQLALCHEMY_ENGINE_OPTIONS']['connect_args']
    assert connect_args['timeout'] == app.config['SQLITE_BUSY_TIMEOUT']
    assert connect_args['check_same_thread'] is False


def test_ownership_enforced_by_default(app):
    assert app.config['ENFORCE_ORDER_OWNERSHIP'] is True


def test_seed_demo_is_idempotent(app, monkeypatch):
    monkeypatch.delenv('DEMO_USER_PASSWORD', raising=False)
    build_database(seed_demo=True)
    build_database(seed_demo=True)

    assert User.query.count() == 2
    assert Item.query.count() == len(DEMO_ITEMS)
    assert User.query.filter_by(role='employee').one().check_password('demo-password-123')


def test_loggers_share_the_marketplace_tree():
    assert get_logger('orders').name == 'marketplace.orders'
    assert get_logger('marketplace.orders.engine').parent.name in ('marketplace.orders', 'marketplace')
    assert get_logger().name == 'marketplace'
