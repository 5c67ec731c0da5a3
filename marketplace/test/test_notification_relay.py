"""
Notification relay: inbox contents track pending orders exactly
"""
from sqlalchemy.exc import OperationalError

from marketplace.business.core.outcomes import Forbidden, NotFound, TransientFailure, ValidationError
from marketplace.business.orders.notification_relay import NotificationRelay
from marketplace.business.orders.order_lifecycle import OrderLifecycleEngine
from marketplace.data.orders.notification import Notification
from marketplace.data.orders.order import Order, STATUS_PENDING
from marketplace.data.orders.order_transaction import OrderTransaction
from marketplace.services.orders.order_views import OrderViewService
from marketplace.test.conftest import identity_of, make_item


def _place(customer, item, quantity=1):
    return OrderLifecycleEngine().place_order(identity_of(customer), item.id, quantity).value


def test_inbox_lists_only_pending_orders_newest_first(app, customer, employee, item):
    first = _place(customer, item)
    second = _place(customer, item)
    third = _place(customer, item)
    OrderLifecycleEngine().accept_order(identity_of(employee), second.id)

    inbox = NotificationRelay().pending_for(employee.id)

    assert [n.order_id for n in inbox] == [third.id, first.id]


def test_inbox_is_per_employee(app, customer, employee, other_employee, item):
    other_item = make_item(other_employee, name='Gadget')
    _place(customer, item)
    _place(customer, other_item)

    relay = NotificationRelay()
    assert [n.item_name for n in relay.pending_for(employee.id)] == ['Widget']
    assert [n.item_name for n in relay.pending_for(other_employee.id)] == ['Gadget']


def test_stale_entry_never_surfaces(app, db, customer, employee, item):
    order = _place(customer, item)
    # Simulate drift: order decided without going through the engine
    Order.query.filter_by(id=order.id).update({'status': 'declined'})
    db.session.commit()

    assert Notification.query.filter_by(order_id=order.id).count() == 1
    assert NotificationRelay().pending_for(employee.id) == []


def test_reconcile_repairs_drift(app, db, customer, employee, item):
    kept = _place(customer, item)
    decided = _place(customer, item)
    Order.query.filter_by(id=decided.id).update({'status': 'accepted'})
    Notification.query.filter_by(order_id=kept.id).delete()
    db.session.commit()

    counts = NotificationRelay().reconcile()

    assert counts == {'created': 1, 'removed': 1}
    remaining = Notification.query.all()
    assert [n.order_id for n in remaining] == [kept.id]
    assert remaining[0].status == STATUS_PENDING
    assert NotificationRelay().reconcile() == {'created': 0, 'removed': 0}


def test_accept_via_notification(app, customer, employee, item):
    order = _place(customer, item)
    notification = Notification.query.filter_by(order_id=order.id).one()

    outcome = OrderLifecycleEngine().accept_notification(identity_of(employee), notification.id)

    assert outcome.ok
    assert outcome.value.status == 'accepted'
    assert OrderTransaction.query.filter_by(order_id=order.id).count() == 1
    assert Notification.query.count() == 0


def test_other_employees_notification_reads_as_missing(app, customer, employee, other_employee, item):
    order = _place(customer, item)
    notification = Notification.query.filter_by(order_id=order.id).one()

    outcome = OrderLifecycleEngine().decline_notification(identity_of(other_employee), notification.id)

    assert isinstance(outcome.error, NotFound)
    assert Order.query.filter_by(id=order.id).one().status == 'pending'


def test_mark_read(app, customer, employee, item):
    order = _place(customer, item)
    notification = Notification.query.filter_by(order_id=order.id).one()
    relay = NotificationRelay()

    assert relay.mark_read(identity_of(customer), notification.id).error == Forbidden(
        "Only employees have a notification inbox."
    )
    outcome = relay.mark_read(identity_of(employee), notification.id)

    assert outcome.ok
    assert Notification.query.filter_by(id=notification.id).one().read_at is not None


def test_pending_notifications_view_shape(app, customer, employee, item):
    order = _place(customer, item, quantity=2)

    [entry] = OrderViewService.pending_notifications(employee.id)

    assert entry['read_at'] is None
    assert entry['data'] == {
        'message': f"New order placed by {customer.name} for item Widget",
        'order_id': order.id,
        'item_name': 'Widget',
        'quantity': 2,
        'status': 'pending',
        'customer_id': customer.id,
        'customer_name': customer.name,
        'customer_email': customer.email,
    }


def test_mark_read_storage_failure_rolls_back(app, db, customer, employee, item, monkeypatch):
    order = _place(customer, item)
    notification_id = Notification.query.filter_by(order_id=order.id).one().id

    def broken_commit():
        raise OperationalError("UPDATE notifications", {}, Exception("database is locked"))

    monkeypatch.setattr(db.session, 'commit', broken_commit)
    outcome = NotificationRelay().mark_read(identity_of(employee), notification_id)
    monkeypatch.undo()

    assert isinstance(outcome.error, TransientFailure)
    assert outcome.error.to_payload()['retryable'] is True
    assert db.session.get(Notification, notification_id).read_at is None


def test_mark_read_rejects_oversized_id(app, employee):
    outcome = NotificationRelay().mark_read(identity_of(employee), 10 ** 30)
    assert isinstance(outcome.error, ValidationError)
