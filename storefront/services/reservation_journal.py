"""Durable record of in-flight checkout reservations.

A checkout writes its intent before it touches stock. Each line's
``reserved``/``released`` flag is committed together with the stock
update it describes, so after a crash the journal says exactly which
units are held and a sweep can hand them back.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from sqlmodel import Session, select

from storefront.config import settings
from storefront.errors import InternalError
from storefront.models.base import utcnow
from storefront.models.reservation import IntentStatus, ReservationIntent, ReservationLine
from storefront.services.inventory_service import release_stock, reserve_stock

logger = logging.getLogger(__name__)


def open_intent(session: Session, user_id: int, items: List[Tuple[int, int]]) -> ReservationIntent:
    intent = ReservationIntent(user_id=user_id)
    session.add(intent)
    for product_id, quantity in items:
        session.add(ReservationLine(intent_id=intent.id, product_id=product_id, quantity=quantity))
    session.commit()
    session.refresh(intent)

    logger.info(
        f"Opened reservation intent {intent.id} with {len(items)} lines",
        extra={"attempt_id": intent.id, "user_id": user_id},
    )
    return intent


def reserve_line(session: Session, line: ReservationLine, before_retry: Optional[Callable[[], None]] = None) -> None:
    """Reserve one line's stock and flag it in the same commit."""
    def mark(s: Session):
        line.reserved = True
        s.add(line)

    reserve_stock(session, line.product_id, line.quantity, journal=mark, before_retry=before_retry)


def _release_line(session: Session, intent_id: str, line: ReservationLine) -> bool:
    def mark(s: Session):
        line.released = True
        s.add(line)

    attempts = max(1, settings.release_retry_attempts)
    for attempt in range(1, attempts + 1):
        try:
            release_stock(session, line.product_id, line.quantity, journal=mark)
            return True
        except InternalError as e:
            logger.warning(
                f"Release attempt {attempt}/{attempts} for intent {intent_id} failed: {e}",
                extra={
                    "attempt_id": intent_id,
                    "product_id": line.product_id,
                    "quantity": line.quantity,
                },
            )

    # stock is now short by line.quantity until someone reconciles it
    logger.error(
        f"COMPENSATION FAILED: intent {intent_id} still holds "
        f"{line.quantity} of product {line.product_id}",
        extra={
            "attempt_id": intent_id,
            "product_id": line.product_id,
            "quantity": line.quantity,
            "event": "compensation_failed",
        },
    )
    return False


def compensate(session: Session, intent: ReservationIntent, reason: str) -> bool:
    """Give back every unit this intent still holds.

    Safe to call again: lines already released are skipped.
    """
    session.refresh(intent)
    pending = [line for line in intent.lines if line.reserved and not line.released]

    ok = True
    for line in pending:
        if not _release_line(session, intent.id, line):
            ok = False

    intent.status = (IntentStatus.compensated if ok else IntentStatus.compensation_failed).value
    intent.failure_reason = reason
    intent.updated_at = utcnow()
    session.add(intent)
    session.commit()

    logger.info(
        f"Intent {intent.id} {intent.status}: released {len(pending)} lines ({reason})",
        extra={"attempt_id": intent.id},
    )
    return ok


def complete_intent(session: Session, intent: ReservationIntent, order_id: int) -> None:
    """Mark the intent done. Caller commits, together with the order."""
    intent.status = IntentStatus.completed.value
    intent.order_id = order_id
    intent.updated_at = utcnow()
    session.add(intent)


def recover_stale_reservations(session: Session, now: Optional[datetime] = None) -> int:
    """Compensate intents abandoned mid-checkout. Returns how many were swept."""
    now = now or utcnow()
    cutoff = now - timedelta(minutes=settings.reservation_stale_minutes)

    intents = session.exec(
        select(ReservationIntent)
        .where(ReservationIntent.status.in_([
            IntentStatus.pending.value,
            IntentStatus.compensation_failed.value,
        ]))
        .where(ReservationIntent.created_at < cutoff)
    ).all()

    for intent in intents:
        compensate(session, intent, reason="recovered_stale_intent")

    return len(intents)
