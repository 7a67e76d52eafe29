# storefront/services/order_event_service.py

from typing import List, Optional
from uuid import uuid4
from sqlmodel import Session, select
from storefront.models.base import utcnow
from storefront.models.order_event import OrderEvent


def log_order_event(
    session: Session,
    order_id: int,
    event_type: str,
    label: str,
    created_by: str = "system",
    meta: Optional[dict] = None,
):
    """
    Append-only event log for order timeline.
    Added to the session only, the caller's commit persists it.
    """

    event = OrderEvent(
        id=str(uuid4()),
        order_id=order_id,
        event_type=event_type,
        label=label,
        meta=meta,
        created_by=created_by,
        created_at=utcnow(),
    )

    session.add(event)
    return event


def order_timeline(session: Session, order_id: int) -> List[OrderEvent]:
    return session.exec(
        select(OrderEvent)
        .where(OrderEvent.order_id == order_id)
        .order_by(OrderEvent.created_at)
    ).all()
