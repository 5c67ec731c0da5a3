"""
Item Service
Read-only item listings.
"""

from typing import Any, Dict, List

from marketplace.data.catalog.item import Item


class ItemService:

    @staticmethod
    def items_for_employee(employee_id: int) -> List[Dict[str, Any]]:
        items = (
            Item.query
            .filter_by(employee_id=employee_id, is_active=True)
            .order_by(Item.id)
            .all()
        )
        return [item.to_dict() for item in items]

    @staticmethod
    def items_for_sale() -> List[Dict[str, Any]]:
        """Active items with stock on hand"""
        items = (
            Item.query
            .filter(Item.is_active.is_(True), Item.quantity > 0, Item.employee_id.isnot(None))
            .order_by(Item.id)
            .all()
        )
        return [item.to_dict() for item in items]
