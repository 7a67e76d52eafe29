# -------- ADMIN ORDERS --------
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from storefront.database import get_session
from storefront.models.order import OrderStatus
from storefront.models.user import User
from storefront.schemas.orders_schemas import (
    OrderStatusUpdate,
    PaymentStatusUpdate,
    order_list_item,
    order_to_dict,
)
from storefront.services.order_query import get_order, list_orders
from storefront.services.order_state import set_order_status, set_payment_status
from storefront.utils.token import get_current_admin

router = APIRouter()


@router.get("")
def list_all_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin)
):
    data = list_orders(session, status=order_status, page=page, limit=limit, with_customer=True)
    data["orders"] = [
        {
            **order_list_item(o),
            "user_id": u.id,
            "customer_name": f"{u.first_name} {u.last_name}",
            "customer_email": u.email,
        }
        for o, u in data["orders"]
    ]
    return data


@router.get("/{order_id}")
def admin_order_detail(
    order_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin)
):
    return {"order": order_to_dict(get_order(session, order_id))}


@router.put("/{order_id}/status")
def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    order = set_order_status(session, order_id, data.status, actor=f"admin:{admin.id}")
    return {"message": "Order status updated", "order": order_to_dict(order)}


@router.put("/{order_id}/payment")
def update_payment_status(
    order_id: int,
    data: PaymentStatusUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    order = set_payment_status(session, order_id, data.status, actor=f"admin:{admin.id}")
    return {"message": "Payment status updated", "order": order_to_dict(order)}
