from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import List, Optional
from decimal import Decimal
from datetime import datetime
from enum import Enum

from storefront.models.base import timestamp_column, utcnow
from storefront.models.order_item import OrderItem


class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    refunded = "refunded"


class PaymentMethod(str, Enum):
    card = "card"
    cash_on_delivery = "cash_on_delivery"


class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    order_number: str = Field(unique=True, index=True)

    shipping_address: dict = Field(sa_column=Column(JSON, nullable=False))
    payment_method: str = Field(default=PaymentMethod.cash_on_delivery.value)
    payment_status: str = Field(default=PaymentStatus.pending.value)
    order_status: str = Field(default=OrderStatus.pending.value, index=True)

    subtotal: Decimal = Field(max_digits=12, decimal_places=2)
    shipping_cost: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    tax: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    total_amount: Decimal = Field(max_digits=12, decimal_places=2)

    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column(index=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    # status history, earlier stamps are kept when the order moves on
    paid_at: Optional[datetime] = Field(default=None, sa_column=timestamp_column(nullable=True))
    confirmed_at: Optional[datetime] = Field(default=None, sa_column=timestamp_column(nullable=True))
    processing_at: Optional[datetime] = Field(default=None, sa_column=timestamp_column(nullable=True))
    shipped_at: Optional[datetime] = Field(default=None, sa_column=timestamp_column(nullable=True))
    delivered_at: Optional[datetime] = Field(default=None, sa_column=timestamp_column(nullable=True))
    cancelled_at: Optional[datetime] = Field(default=None, sa_column=timestamp_column(nullable=True))

    items: List["OrderItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"order_by": "OrderItem.id"},
    )
