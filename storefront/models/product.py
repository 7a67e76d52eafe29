from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint
from typing import Optional
from decimal import Decimal
from datetime import datetime

from storefront.models.base import timestamp_column, utcnow


class Product(SQLModel, table=True):
    # stock is owned by the catalog, this service only moves it through
    # services.inventory_service
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    price: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    stock: int = Field(default=0)

    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    @property
    def in_stock(self) -> bool:
        return self.stock > 0
