from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from sqlmodel import SQLModel, Field, Relationship

from storefront.models.base import timestamp_column, utcnow


class IntentStatus(str, Enum):
    pending = "pending"
    completed = "completed"
    compensated = "compensated"
    compensation_failed = "compensation_failed"


class ReservationIntent(SQLModel, table=True):
    """One checkout attempt. Written before any stock is touched."""

    __tablename__ = "reservation_intent"
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)

    user_id: int = Field(foreign_key="user.id", index=True)
    status: str = Field(default=IntentStatus.pending.value, index=True)
    order_id: Optional[int] = Field(default=None, foreign_key="order.id")
    failure_reason: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column(index=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    lines: List["ReservationLine"] = Relationship(
        back_populates="intent",
        sa_relationship_kwargs={"order_by": "ReservationLine.product_id"},
    )


class ReservationLine(SQLModel, table=True):
    __tablename__ = "reservation_line"
    id: Optional[int] = Field(default=None, primary_key=True)
    intent_id: str = Field(foreign_key="reservation_intent.id", index=True)

    product_id: int
    quantity: int

    # flipped in the same transaction as the stock update they describe
    reserved: bool = False
    released: bool = False

    intent: Optional[ReservationIntent] = Relationship(back_populates="lines")
