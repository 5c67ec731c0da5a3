"""
Order routes - placement, employee decisions, customer receipt and dashboards
"""

from flask import Blueprint, jsonify
from flask_login import login_required

from marketplace.business.orders.order_lifecycle import OrderLifecycleEngine
from marketplace.business.orders.notification_relay import NotificationRelay
from marketplace.logger import get_logger
from marketplace.presentation.routes.helpers import forbidden, request_identity, request_payload, respond
from marketplace.services.orders.order_views import OrderViewService

logger = get_logger("marketplace.routes.orders")

bp = Blueprint('orders', __name__)


def _order_body(outcome):
    return {'message': outcome.message, 'order': outcome.value.to_dict()} if outcome.ok else None


@bp.route('/buy-item', methods=['POST'])
@login_required
def buy_item():
    data, invalid = request_payload()
    if invalid:
        return respond(invalid)
    identity = request_identity()
    logger.debug(f"Buy request from user {identity.user_id}: {data}")
    outcome = OrderLifecycleEngine().place_order(identity, data.get('item_id'), data.get('quantity'))
    return respond(outcome, body=_order_body(outcome))


@bp.route('/orders/<int:order_id>/accept', methods=['POST'])
@login_required
def accept_order(order_id):
    outcome = OrderLifecycleEngine().accept_order(request_identity(), order_id)
    return respond(outcome, body=_order_body(outcome))


@bp.route('/orders/<int:order_id>/decline', methods=['POST'])
@login_required
def decline_order(order_id):
    outcome = OrderLifecycleEngine().decline_order(request_identity(), order_id)
    return respond(outcome, body=_order_body(outcome))


@bp.route('/notifications/<int:notification_id>/accept', methods=['POST'])
@login_required
def accept_notification(notification_id):
    outcome = OrderLifecycleEngine().accept_notification(request_identity(), notification_id)
    return respond(outcome, body=_order_body(outcome))


@bp.route('/notifications/<int:notification_id>/decline', methods=['POST'])
@login_required
def decline_notification(notification_id):
    outcome = OrderLifecycleEngine().decline_notification(request_identity(), notification_id)
    return respond(outcome, body=_order_body(outcome))


@bp.route('/notifications/<int:notification_id>/read', methods=['POST'])
@login_required
def read_notification(notification_id):
    outcome = NotificationRelay().mark_read(request_identity(), notification_id)
    return respond(outcome)


@bp.route('/mark-received/<int:order_id>', methods=['POST'])
@login_required
def mark_received(order_id):
    outcome = OrderLifecycleEngine().mark_received(request_identity(), order_id)
    return respond(outcome, body=_order_body(outcome))


@bp.route('/my-orders', methods=['GET'])
@login_required
def my_orders():
    identity = request_identity()
    if not identity.is_customer:
        return forbidden("Only customers have orders.")
    return jsonify(OrderViewService.my_orders(identity.user_id))


@bp.route('/orders/accepted', methods=['GET'])
@login_required
def accepted_orders():
    identity = request_identity()
    if not identity.is_employee:
        return forbidden("Only employees have accepted orders.")
    return jsonify(OrderViewService.accepted_orders(identity.user_id))


@bp.route('/notifications', methods=['GET'])
@login_required
def notifications():
    identity = request_identity()
    if not identity.is_employee:
        return forbidden("Only employees have a notification inbox.")
    return jsonify(OrderViewService.pending_notifications(identity.user_id))


@bp.route('/transactions', methods=['GET'])
@login_required
def transactions():
    identity = request_identity()
    return jsonify(OrderViewService.transaction_history(identity.user_id, as_employee=identity.is_employee))
