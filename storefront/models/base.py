# storefront/models/base.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def timestamp_column(nullable: bool = False, index: bool = False) -> Column:
    """A fresh timezone aware column, one per field."""
    return Column(DateTime(timezone=True), nullable=nullable, index=index)
