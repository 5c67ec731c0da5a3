from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import inspect

from marketplace import db


def utcnow():
    """Naive UTC timestamp, the form SQLite round-trips."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampedBase(db.Model):
    """Abstract base for every marketplace table: integer id plus audit timestamps"""

    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self, skip_fields=None):
        """
        Convert the row's columns to a JSON-friendly dictionary

        Args:
            skip_fields (list, optional): Column names to leave out

        Returns:
            dict: Column values, datetimes as ISO strings and decimals as strings
        """
        skip_fields = set(skip_fields or [])
        result = {}
        for column in inspect(self.__class__).columns:
            if column.key in skip_fields:
                continue
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = str(value)
            result[column.key] = value
        return result
