from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from marketplace import db
from marketplace.business.core.identity import RequestIdentity
from marketplace.business.core.outcomes import (
    CatalogOutcome,
    Forbidden,
    NotFound,
    Outcome,
    TransientFailure,
    ValidationError,
)
from marketplace.business.core.validation import parse_int, parse_price, parse_text
from marketplace.data.catalog.item import Item
from marketplace.logger import get_logger

logger = get_logger("marketplace.catalog.items")

NAME_MAX_LENGTH = 255


class ItemManager:
    """
    Employee-side item maintenance.

    Only employees create items; only the owning employee updates or deletes one.
    Deleting delists the item (is_active=False) instead of removing the row.
    """

    def create_item(self, identity: RequestIdentity, fields: dict) -> CatalogOutcome:
        if not identity.is_employee:
            return Outcome.failure(Forbidden("Only employees can list items."))

        values, error = self._validate(fields, partial=False)
        if error:
            return Outcome.failure(error)

        item = Item(employee_id=identity.user_id, **values)
        try:
            db.session.add(item)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Error creating item for employee {identity.user_id}")
            return Outcome.failure(TransientFailure("Failed to create the item. Please try again later."))

        logger.info(f"Item {item.id} '{item.name}' created by employee {identity.user_id}")
        return Outcome.success(item, "Item created.")

    def update_item(self, identity: RequestIdentity, item_id: int, fields: dict) -> CatalogOutcome:
        found = self._owned_item(identity, item_id)
        if not found.ok:
            return found
        item = found.value

        values, error = self._validate(fields, partial=True)
        if error:
            return Outcome.failure(error)

        for key, value in values.items():
            setattr(item, key, value)
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Error updating item {item_id}")
            return Outcome.failure(TransientFailure("Failed to update the item. Please try again later."))

        logger.info(f"Item {item_id} updated by employee {identity.user_id}: {sorted(values)}")
        return Outcome.success(item, "Item updated.")

    def delete_item(self, identity: RequestIdentity, item_id: int) -> CatalogOutcome:
        found = self._owned_item(identity, item_id)
        if not found.ok:
            return found
        item = found.value

        item.is_active = False
        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"Error deleting item {item_id}")
            return Outcome.failure(TransientFailure("Failed to delete the item. Please try again later."))

        logger.info(f"Item {item_id} delisted by employee {identity.user_id}")
        return Outcome.success(item, "Item deleted successfully")

    def _owned_item(self, identity: RequestIdentity, item_id) -> CatalogOutcome:
        item_id, error = parse_int(item_id, 'item id', minimum=1)
        if error:
            return Outcome.failure(error)
        item = db.session.get(Item, item_id)
        if item is None or not item.is_active:
            return Outcome.failure(NotFound("Item not found."))
        if not identity.is_employee or item.employee_id != identity.user_id:
            logger.warning(f"User {identity.user_id} denied access to item {item_id}")
            return Outcome.failure(Forbidden("Unauthorized"))
        return Outcome.success(item)

    @staticmethod
    def _validate(fields: dict, *, partial: bool):
        """
        Validate item fields.

        Returns:
            tuple: (dict of column values, None) or (None, ValidationError)
        """
        fields = fields or {}
        parsers = {
            'name': lambda v: parse_text(v, 'name', max_length=NAME_MAX_LENGTH),
            'description': lambda v: parse_text(v, 'description', allow_empty=True),
            'quantity': lambda v: parse_int(v, 'quantity', minimum=0),
            'price': lambda v: parse_price(v, 'price'),
        }
        values = {}
        for key, parser in parsers.items():
            if key not in fields:
                if partial:
                    continue
                return None, parser(None)[1]
            value, error = parser(fields[key])
            if error:
                return None, error
            values[key] = value

        if 'image' in fields:
            image = fields['image']
            if image is not None and not isinstance(image, str):
                return None, ValidationError("The image field must be a string.")
            values['image'] = (image or '').strip() or None

        return values, None
