"""Turn a user's cart into an order.

Products are reserved one at a time in ascending id order. Each
reservation is its own commit, recorded in the reservation journal; if
any step fails every unit taken so far is handed back before the error
reaches the caller. The order row, the journal's completion and the
cart clear share one final commit.

The timeout is checked before every reservation and before every
storage retry, so a slow checkout overruns it by at most one storage
attempt.
"""
import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from storefront.config import settings
from storefront.errors import (
    CartEmpty,
    CheckoutTimeout,
    InternalError,
    InvalidPaymentMethod,
    ProductNotFound,
    StoreError,
)
from storefront.models.order import Order, OrderStatus, PaymentMethod, PaymentStatus
from storefront.models.order_item import OrderItem
from storefront.models.product import Product
from storefront.models.reservation import ReservationIntent
from storefront.services import reservation_journal
from storefront.services.cart_service import clear_cart, get_cart
from storefront.services.order_event_service import log_order_event
from storefront.services.order_number import generate_order_number
from storefront.services.pricing import calculate_totals

logger = logging.getLogger(__name__)

_clock = time.monotonic


@dataclass(frozen=True)
class FrozenLine:
    product_id: int
    title: str
    price: Decimal
    quantity: int


def _snapshot_cart(session: Session, user_id: int):
    cart = get_cart(session, user_id)
    if not cart.items:
        raise CartEmpty()

    quantities = {}
    for item in cart.items:
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity

    return sorted(quantities.items())


def _check_deadline(deadline: float):
    if _clock() >= deadline:
        raise CheckoutTimeout(settings.checkout_timeout_seconds)


def _reserve_all(session: Session, intent: ReservationIntent, deadline: float) -> List[FrozenLine]:
    frozen = []
    for line in intent.lines:
        _check_deadline(deadline)
        reservation_journal.reserve_line(
            session, line, before_retry=lambda: _check_deadline(deadline)
        )

        # title and price are fixed at the moment the units are ours
        product = session.get(Product, line.product_id, populate_existing=True)
        frozen.append(FrozenLine(
            product_id=line.product_id,
            title=product.title,
            price=product.price,
            quantity=line.quantity,
        ))
    _check_deadline(deadline)
    return frozen


def _persist_order(
    session: Session,
    intent: ReservationIntent,
    user_id: int,
    lines: List[FrozenLine],
    shipping_address: dict,
    payment_method: str,
    notes: Optional[str],
) -> Order:
    totals = calculate_totals(lines)
    attempts = max(1, settings.order_number_attempts)

    for attempt in range(1, attempts + 1):
        order_number = generate_order_number()
        order = Order(
            user_id=user_id,
            order_number=order_number,
            shipping_address=shipping_address,
            payment_method=payment_method,
            payment_status=PaymentStatus.pending.value,
            order_status=OrderStatus.pending.value,
            subtotal=totals.subtotal,
            shipping_cost=totals.shipping_cost,
            tax=totals.tax,
            total_amount=totals.total,
            notes=notes,
            items=[
                OrderItem(
                    product_id=line.product_id,
                    title=line.title,
                    price=line.price,
                    quantity=line.quantity,
                )
                for line in lines
            ],
        )

        try:
            session.add(order)
            session.flush()
        except IntegrityError:
            session.rollback()
            logger.warning(
                f"Order number collision on {order_number} (attempt {attempt}/{attempts})",
                extra={"attempt_id": intent.id},
            )
            continue

        reservation_journal.complete_intent(session, intent, order.id)
        clear_cart(session, user_id, commit=False)
        log_order_event(
            session,
            order.id,
            event_type="placed",
            label=f"Order {order_number} placed",
            created_by=f"user:{user_id}",
            meta={"total_amount": str(totals.total), "attempt_id": intent.id},
        )
        session.commit()
        session.refresh(order)
        return order

    raise InternalError("Could not allocate a unique order number")


def place_order(
    session: Session,
    user_id: int,
    shipping_address: dict,
    payment_method: str = PaymentMethod.cash_on_delivery.value,
    notes: Optional[str] = None,
) -> Order:
    try:
        payment_method = PaymentMethod(payment_method).value
    except ValueError:
        raise InvalidPaymentMethod(payment_method) from None

    deadline = _clock() + settings.checkout_timeout_seconds

    items = _snapshot_cart(session, user_id)
    for product_id, _ in items:
        if session.get(Product, product_id) is None:
            raise ProductNotFound(product_id)

    intent = reservation_journal.open_intent(session, user_id, items)

    try:
        lines = _reserve_all(session, intent, deadline)
        order = _persist_order(
            session, intent, user_id, lines, shipping_address, payment_method, notes
        )
    except StoreError as e:
        session.rollback()
        reservation_journal.compensate(session, intent, reason=e.code)
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception(f"Checkout {intent.id} hit a storage error")
        reservation_journal.compensate(session, intent, reason="storage_error")
        raise InternalError("Storage failure during checkout") from e

    logger.info(
        f"Order {order.order_number} placed for user {user_id}: total {order.total_amount}",
        extra={"order_id": order.id, "attempt_id": intent.id},
    )
    return order
