import logging
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session

from storefront.constants.order_status import CANCELLABLE_STATUSES
from storefront.errors import OrderCannotCancel
from storefront.models.base import utcnow
from storefront.models.order import Order, OrderStatus
from storefront.services.inventory_service import release_items, storage_retry
from storefront.services.order_event_service import log_order_event
from storefront.services.order_query import get_order

logger = logging.getLogger(__name__)


def cancel_order(
    session: Session,
    order_id: int,
    user_id: Optional[int] = None,
    cancelled_by: Optional[str] = None,
) -> Order:
    """Cancel a pending/confirmed order and return its stock.

    ``user_id`` restricts the lookup to the owner; admins pass None.
    The status flip is guarded on the current status inside the same
    transaction as the stock release, so a second cancel can never
    release the units twice. Payment is not touched.
    """
    order = get_order(session, order_id, user_id=user_id)
    if OrderStatus(order.order_status) not in CANCELLABLE_STATUSES:
        raise OrderCannotCancel(order.order_status)

    items = [(item.product_id, item.quantity) for item in order.items]
    actor = cancelled_by or (f"user:{user_id}" if user_id is not None else "admin")

    def unit():
        now = utcnow()
        result = session.execute(
            update(Order)
            .where(
                Order.id == order_id,
                Order.order_status.in_([s.value for s in CANCELLABLE_STATUSES]),
            )
            .values(
                order_status=OrderStatus.cancelled.value,
                cancelled_at=now,
                updated_at=now,
            )
        )
        if result.rowcount != 1:
            session.rollback()
            return False

        release_items(session, items)
        log_order_event(
            session,
            order_id,
            event_type="cancelled",
            label="Order cancelled, stock returned",
            created_by=actor,
            meta={"items": [{"product_id": p, "quantity": q} for p, q in items]},
        )
        session.commit()
        return True

    if not storage_retry(session, unit, action="cancel", order_id=order_id):
        session.refresh(order)
        raise OrderCannotCancel(order.order_status)

    session.refresh(order)
    logger.info(f"Order {order.order_number} cancelled by {actor}", extra={"order_id": order_id})
    return order
