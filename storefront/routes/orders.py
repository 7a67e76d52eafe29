from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from storefront.database import get_session
from storefront.models.order import OrderStatus
from storefront.models.user import User
from storefront.schemas.orders_schemas import PlaceOrderRequest, order_list_item, order_to_dict
from storefront.services.checkout_service import place_order
from storefront.services.order_cancellation import cancel_order
from storefront.services.order_event_service import order_timeline
from storefront.services.order_query import get_order, get_order_by_number, list_orders
from storefront.utils.token import get_current_user

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_order(
    data: PlaceOrderRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = place_order(
        session,
        current_user.id,
        shipping_address=data.shipping_address.model_dump(),
        payment_method=data.payment_method.value,
        notes=data.notes,
    )
    return {"message": "Order placed", "order": order_to_dict(order)}


@router.get("")
def my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    data = list_orders(session, user_id=current_user.id, status=order_status, page=page, limit=limit)
    data["orders"] = [order_list_item(o) for o in data["orders"]]
    return data


@router.get("/number/{order_number}")
def order_by_number(
    order_number: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = get_order_by_number(session, order_number, user_id=current_user.id)
    return {"order": order_to_dict(order)}


@router.get("/{order_id}")
def order_detail(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return {"order": order_to_dict(get_order(session, order_id, user_id=current_user.id))}


@router.get("/{order_id}/timeline")
def order_events(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = get_order(session, order_id, user_id=current_user.id)
    return {
        "order_id": order.id,
        "events": [
            {
                "type": e.event_type,
                "label": e.label,
                "created_at": e.created_at,
                "created_by": e.created_by,
            }
            for e in order_timeline(session, order.id)
        ],
    }


@router.post("/{order_id}/cancel")
def cancel_my_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = cancel_order(session, order_id, user_id=current_user.id)
    return {"message": "Order cancelled", "order": order_to_dict(order)}
