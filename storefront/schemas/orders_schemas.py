from pydantic import BaseModel, Field
from typing import Optional

from storefront.models.order import OrderStatus, PaymentMethod, PaymentStatus


class ShippingAddress(BaseModel):
    full_name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    country: str = Field(min_length=1)
    phone: Optional[str] = None


class PlaceOrderRequest(BaseModel):
    shipping_address: ShippingAddress
    payment_method: PaymentMethod = PaymentMethod.cash_on_delivery
    notes: Optional[str] = Field(default=None, max_length=500)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus


TIMESTAMP_FIELDS = (
    "paid_at",
    "confirmed_at",
    "processing_at",
    "shipped_at",
    "delivered_at",
    "cancelled_at",
)


def order_to_dict(order) -> dict:
    data = {
        "id": order.id,
        "order_number": order.order_number,
        "user_id": order.user_id,
        "items": [
            {
                "product_id": i.product_id,
                "title": i.title,
                "quantity": i.quantity,
                "price": i.price,
                "subtotal": i.line_total,
            }
            for i in order.items
        ],
        "shipping_address": order.shipping_address,
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "order_status": order.order_status,
        "subtotal": order.subtotal,
        "shipping_cost": order.shipping_cost,
        "tax": order.tax,
        "total_amount": order.total_amount,
        "notes": order.notes,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }
    for field in TIMESTAMP_FIELDS:
        value = getattr(order, field)
        if value:
            data[field] = value
    return data


def order_list_item(order) -> dict:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "item_count": sum(i.quantity for i in order.items),
        "total_amount": order.total_amount,
        "payment_status": order.payment_status,
        "order_status": order.order_status,
        "created_at": order.created_at,
    }
