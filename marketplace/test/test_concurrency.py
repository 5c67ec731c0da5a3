"""
Concurrent requests against shared rows: stock must never be overdrawn and an order
must be decided exactly once.
"""
import threading

from marketplace.business.core.outcomes import Conflict
from marketplace.business.orders.order_lifecycle import OrderLifecycleEngine
from marketplace.data.catalog.item import Item
from marketplace.data.orders.notification import Notification
from marketplace.data.orders.order import Order
from marketplace.data.orders.order_transaction import OrderTransaction
from marketplace.test.conftest import identity_of, make_item


def _run_concurrently(app, calls):
    """Run each zero-arg callable in its own thread and app context, released together."""
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)

    def worker(index, call):
        with app.app_context():
            barrier.wait()
            results[index] = call()

    threads = [threading.Thread(target=worker, args=(i, call)) for i, call in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return results


def test_concurrent_orders_never_overdraw_stock(app, db, customer, employee):
    item = make_item(employee, quantity=5)
    item_id = item.id
    buyer = identity_of(customer)

    results = _run_concurrently(
        app,
        [lambda: OrderLifecycleEngine().place_order(buyer, item_id, 1) for _ in range(12)],
    )

    succeeded = [r for r in results if r.ok]
    rejected = [r for r in results if not r.ok]
    assert len(succeeded) == 5
    assert len(rejected) == 7
    assert all(isinstance(r.error, Conflict) for r in rejected)

    db.session.expire_all()
    assert db.session.get(Item, item_id).quantity == 0
    assert Order.query.filter_by(item_id=item_id).count() == 5
    assert Notification.query.count() == 5


def test_concurrent_accept_and_decline_decide_once(app, db, customer, employee, item):
    placed = OrderLifecycleEngine().place_order(identity_of(customer), item.id, 1)
    order_id = placed.value.id
    decider = identity_of(employee)

    calls = []
    for _ in range(4):
        calls.append(lambda: OrderLifecycleEngine().accept_order(decider, order_id))
        calls.append(lambda: OrderLifecycleEngine().decline_order(decider, order_id))
    results = _run_concurrently(app, calls)

    assert sum(1 for r in results if r.ok) == 1
    assert all(isinstance(r.error, Conflict) for r in results if not r.ok)

    db.session.expire_all()
    entries = OrderTransaction.query.filter_by(order_id=order_id).all()
    assert len(entries) == 1
    assert db.session.get(Order, order_id).status == entries[0].status
    assert Notification.query.filter_by(order_id=order_id).count() == 0
