"""Order and payment status transitions.

Allowed moves live in ``constants.order_status``. A move is applied as
an UPDATE guarded on the status we validated against, so two admins
racing on the same order cannot both succeed from the same state.
"""
import logging

from sqlalchemy import update
from sqlmodel import Session

from storefront.constants.order_status import (
    ORDER_TRANSITIONS,
    PAYMENT_TRANSITIONS,
    STATUS_TIMESTAMPS,
)
from storefront.errors import InvalidTransition
from storefront.models.base import utcnow
from storefront.models.order import Order, OrderStatus, PaymentStatus
from storefront.services.inventory_service import storage_retry
from storefront.services.order_cancellation import cancel_order
from storefront.services.order_event_service import log_order_event
from storefront.services.order_query import get_order

logger = logging.getLogger(__name__)


def _parse(enum_cls, value, field: str, current: str):
    try:
        return enum_cls(getattr(value, "value", value))
    except ValueError:
        raise InvalidTransition(field, current, str(value)) from None


def ensure_order_transition(current: str, target: OrderStatus) -> None:
    if target not in ORDER_TRANSITIONS[OrderStatus(current)]:
        raise InvalidTransition("order_status", current, target.value)


def ensure_payment_transition(current: str, target: PaymentStatus) -> None:
    if target not in PAYMENT_TRANSITIONS[PaymentStatus(current)]:
        raise InvalidTransition("payment_status", current, target.value)


def _apply(session: Session, order: Order, guard: dict, values: dict, event: dict) -> None:
    """Write ``values`` only if the row still matches ``guard``."""

    def unit():
        criteria = [Order.id == order.id]
        criteria += [getattr(Order, column) == expected for column, expected in guard.items()]
        result = session.execute(update(Order).where(*criteria).values(**values))
        if result.rowcount != 1:
            session.rollback()
            return False
        log_order_event(session, order.id, **event)
        session.commit()
        return True

    if not storage_retry(session, unit, action="order_transition", order_id=order.id):
        session.refresh(order)
        column, expected = next(iter(guard.items()))
        raise InvalidTransition(column, getattr(order, column), str(values.get(column, expected)))

    session.refresh(order)


def set_order_status(session: Session, order_id: int, new_status, actor: str = "admin") -> Order:
    order = get_order(session, order_id)
    current = order.order_status
    target = _parse(OrderStatus, new_status, "order_status", current)

    ensure_order_transition(current, target)

    if target == OrderStatus.cancelled:
        # same path as a customer cancel so the stock comes back
        return cancel_order(session, order_id, cancelled_by=actor)

    now = utcnow()
    _apply(
        session,
        order,
        guard={"order_status": current},
        values={
            "order_status": target.value,
            STATUS_TIMESTAMPS[target]: now,
            "updated_at": now,
        },
        event={
            "event_type": target.value,
            "label": f"Order status changed from {current} to {target.value}",
            "created_by": actor,
            "meta": {"from": current, "to": target.value},
        },
    )
    logger.info(f"Order {order.order_number}: {current} -> {target.value}", extra={"order_id": order_id})
    return order


def set_payment_status(session: Session, order_id: int, new_status, actor: str = "admin") -> Order:
    """Record a payment outcome. Paying a pending order also confirms it."""
    order = get_order(session, order_id)
    current = order.payment_status
    target = _parse(PaymentStatus, new_status, "payment_status", current)

    ensure_payment_transition(current, target)

    now = utcnow()
    values = {"payment_status": target.value, "updated_at": now}
    guard = {"payment_status": current}
    meta = {"from": current, "to": target.value}

    if target == PaymentStatus.paid:
        values["paid_at"] = now
        # only pending orders cascade, later stages keep their status
        if order.order_status == OrderStatus.pending.value:
            values["order_status"] = OrderStatus.confirmed.value
            values["confirmed_at"] = now
            guard["order_status"] = OrderStatus.pending.value
            meta["order_status"] = OrderStatus.confirmed.value

    _apply(
        session,
        order,
        guard=guard,
        values=values,
        event={
            "event_type": f"payment_{target.value}",
            "label": f"Payment status changed from {current} to {target.value}",
            "created_by": actor,
            "meta": meta,
        },
    )
    logger.info(
        f"Order {order.order_number} payment: {current} -> {target.value}",
        extra={"order_id": order_id},
    )
    return order
