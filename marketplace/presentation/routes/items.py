"""
Item routes - employee item maintenance and the customer storefront
"""

from flask import Blueprint, jsonify
from flask_login import login_required

from marketplace.business.catalog.item_manager import ItemManager
from marketplace.logger import get_logger
from marketplace.presentation.routes.helpers import forbidden, request_identity, request_payload, respond
from marketplace.services.catalog.item_service import ItemService

logger = get_logger("marketplace.routes.items")

bp = Blueprint('items', __name__)


@bp.route('/items', methods=['GET'])
@login_required
def list_items():
    identity = request_identity()
    if not identity.is_employee:
        return forbidden("Only employees manage items.")
    return jsonify(ItemService.items_for_employee(identity.user_id))


@bp.route('/items', methods=['POST'])
@login_required
def create_item():
    fields, invalid = request_payload()
    if invalid:
        return respond(invalid)
    outcome = ItemManager().create_item(request_identity(), fields)
    return respond(outcome, 201, body=outcome.value.to_dict() if outcome.ok else None)


@bp.route('/items/<int:item_id>', methods=['PUT'])
@login_required
def update_item(item_id):
    fields, invalid = request_payload()
    if invalid:
        return respond(invalid)
    outcome = ItemManager().update_item(request_identity(), item_id, fields)
    return respond(outcome, body=outcome.value.to_dict() if outcome.ok else None)


@bp.route('/items/<int:item_id>', methods=['DELETE'])
@login_required
def delete_item(item_id):
    outcome = ItemManager().delete_item(request_identity(), item_id)
    return respond(outcome)


@bp.route('/items-for-sale', methods=['GET'])
@login_required
def items_for_sale():
    return jsonify(ItemService.items_for_sale())
