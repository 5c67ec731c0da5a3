"""
Item maintenance and the storefront listing
"""
from decimal import Decimal

import pytest

from marketplace.business.catalog.item_manager import ItemManager
from marketplace.business.core.outcomes import Forbidden, NotFound, ValidationError
from marketplace.business.orders.order_lifecycle import OrderLifecycleEngine
from marketplace.data.catalog.item import Item
from marketplace.services.catalog.item_service import ItemService
from marketplace.services.orders.order_views import OrderViewService
from marketplace.test.conftest import identity_of, make_item

VALID_FIELDS = {
    'name': '  Desk Lamp ',
    'description': 'Warm white',
    'quantity': '4',
    'price': '19.999',
    'image': 'lamp.png',
}


@pytest.fixture
def manager(app):
    return ItemManager()


def test_create_item(manager, db, employee):
    outcome = manager.create_item(identity_of(employee), VALID_FIELDS)

    assert outcome.ok
    item = db.session.get(Item, outcome.value.id)
    assert item.employee_id == employee.id
    assert item.name == 'Desk Lamp'
    assert item.quantity == 4
    assert item.price == Decimal('20.00')
    assert item.image == 'lamp.png'
    assert item.is_active


def test_customer_cannot_create_item(manager, customer):
    outcome = manager.create_item(identity_of(customer), VALID_FIELDS)
    assert isinstance(outcome.error, Forbidden)
    assert Item.query.count() == 0


@pytest.mark.parametrize('field, value', [
    ('name', ''),
    ('name', 'x' * 256),
    ('quantity', -1),
    ('quantity', 'many'),
    ('price', '-0.01'),
    ('price', 'NaN'),
    ('price', 'free'),
    ('image', 42),
])
def test_create_item_rejects_bad_fields(manager, employee, field, value):
    outcome = manager.create_item(identity_of(employee), {**VALID_FIELDS, field: value})
    assert isinstance(outcome.error, ValidationError)
    assert outcome.error.http_status == 400


def test_create_item_requires_every_field(manager, employee):
    fields = dict(VALID_FIELDS)
    del fields['price']
    outcome = manager.create_item(identity_of(employee), fields)
    assert isinstance(outcome.error, ValidationError)


def test_update_is_partial(manager, db, employee, item):
    outcome = manager.update_item(identity_of(employee), item.id, {'quantity': 12})

    assert outcome.ok
    item = db.session.get(Item, item.id)
    assert item.quantity == 12
    assert item.name == 'Widget'
    assert item.price == Decimal('9.99')


def test_update_clears_image(manager, db, employee, item):
    item.image = 'old.png'
    db.session.commit()
    assert manager.update_item(identity_of(employee), item.id, {'image': ''}).ok
    assert db.session.get(Item, item.id).image is None


def test_only_owner_can_update_or_delete(manager, db, other_employee, customer, item):
    for identity in (identity_of(other_employee), identity_of(customer)):
        assert manager.update_item(identity, item.id, {'quantity': 0}).error == Forbidden("Unauthorized")
        assert manager.delete_item(identity, item.id).error == Forbidden("Unauthorized")
    assert db.session.get(Item, item.id).quantity == 5


def test_delete_delists_but_keeps_order_history(manager, db, customer, employee, item):
    OrderLifecycleEngine().place_order(identity_of(customer), item.id, 1)

    outcome = manager.delete_item(identity_of(employee), item.id)

    assert outcome.ok
    assert outcome.message == "Item deleted successfully"
    assert db.session.get(Item, item.id).is_active is False
    assert OrderViewService.my_orders(customer.id)[0]['item']['name'] == 'Widget'
    assert ItemService.items_for_employee(employee.id) == []
    assert isinstance(manager.update_item(identity_of(employee), item.id, {'quantity': 1}).error, NotFound)


def test_unknown_item(manager, employee):
    assert isinstance(manager.delete_item(identity_of(employee), 999).error, NotFound)


def test_items_for_sale(app, employee):
    make_item(employee, quantity=3, name='In stock')
    make_item(employee, quantity=0, name='Sold out')
    make_item(None, quantity=3, name='Orphan')
    delisted = make_item(employee, quantity=3, name='Delisted')
    ItemManager().delete_item(identity_of(employee), delisted.id)

    listing = ItemService.items_for_sale()

    assert [entry['name'] for entry in listing] == ['In stock']
    assert listing[0]['price'] == '9.99'


def test_oversized_values_are_rejected(manager, db, employee, item):
    huge = 10 ** 30
    assert isinstance(manager.update_item(identity_of(employee), huge, {'quantity': 1}).error, ValidationError)
    assert isinstance(manager.delete_item(identity_of(employee), huge).error, ValidationError)
    assert isinstance(manager.update_item(identity_of(employee), item.id, {'quantity': huge}).error, ValidationError)
    assert isinstance(manager.update_item(identity_of(employee), item.id, {'price': '1e40'}).error, ValidationError)
    assert isinstance(manager.update_item(identity_of(employee), item.id, {'price': '100000000'}).error, ValidationError)
    assert db.session.get(Item, item.id).quantity == 5
