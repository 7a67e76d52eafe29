from typing import Optional

from sqlmodel import Session, select

from storefront.errors import OrderNotFound
from storefront.models.order import Order
from storefront.models.user import User
from storefront.utils.pagination import paginate


def get_order(session: Session, order_id: int, user_id: Optional[int] = None) -> Order:
    """Get order by ID, optionally checking user ownership"""
    statement = select(Order).where(Order.id == order_id)
    if user_id is not None:
        statement = statement.where(Order.user_id == user_id)

    order = session.exec(statement).first()
    if not order:
        raise OrderNotFound(order_id)
    return order


def get_order_by_number(session: Session, order_number: str, user_id: Optional[int] = None) -> Order:
    statement = select(Order).where(Order.order_number == order_number)
    if user_id is not None:
        statement = statement.where(Order.user_id == user_id)

    order = session.exec(statement).first()
    if not order:
        raise OrderNotFound(order_number)
    return order


def list_orders(
    session: Session,
    user_id: Optional[int] = None,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    with_customer: bool = False,
) -> dict:
    """Newest first. ``user_id=None`` lists every customer's orders (admin).

    With ``with_customer`` each entry is an ``(Order, User)`` row.
    """
    if with_customer:
        query = select(Order, User).join(User, User.id == Order.user_id)
    else:
        query = select(Order)
    if user_id is not None:
        query = query.where(Order.user_id == user_id)
    if status:
        query = query.where(Order.order_status == getattr(status, "value", status))

    query = query.order_by(Order.created_at.desc(), Order.id.desc())

    data = paginate(session=session, query=query, page=page, limit=limit)
    return {
        "orders": data["results"],
        "total": data["total_items"],
        "pages": data["total_pages"],
        "page": data["current_page"],
        "limit": data["limit"],
    }
