from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from storefront.models.base import timestamp_column, utcnow


class Cart(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", unique=True, index=True)
    total_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    items: List["CartItem"] = Relationship(
        back_populates="cart",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "CartItem.product_id"},
    )


class CartItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    cart_id: int = Field(foreign_key="cart.id", index=True)
    product_id: int = Field(foreign_key="product.id")
    quantity: int = 1
    price: Decimal = Field(max_digits=12, decimal_places=2)
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    cart: Optional[Cart] = Relationship(back_populates="items")
