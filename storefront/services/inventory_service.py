# storefront/services/inventory_service.py
"""Stock mutations.

Every change to ``Product.stock`` goes through a single guarded UPDATE so
two checkouts can never both pass a stale "enough stock?" check. The
guard lives in the WHERE clause and success is read from the rowcount.
"""
import logging
import random
import time
from typing import Callable, Iterable, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from storefront.config import settings
from storefront.errors import InsufficientStock, InternalError, ProductNotFound
from storefront.models.base import utcnow
from storefront.models.product import Product

logger = logging.getLogger(__name__)

Journal = Callable[[Session], None]


def _backoff(attempt: int) -> float:
    base = settings.stock_retry_backoff_seconds
    return base * (2 ** (attempt - 1)) + random.random() * base


def storage_retry(
    session: Session,
    unit: Callable[[], bool],
    *,
    action: str,
    before_retry: Optional[Callable[[], None]] = None,
    **context,
) -> bool:
    """Run ``unit`` (which commits) retrying transient storage failures.

    ``unit`` must leave the session clean when it returns False.
    ``before_retry`` runs ahead of every second and later attempt and
    may raise to stop retrying.
    """
    attempts = max(1, settings.stock_retry_attempts)
    last_error = None

    for attempt in range(1, attempts + 1):
        try:
            return unit()
        except OperationalError as e:
            session.rollback()
            last_error = e
            logger.warning(
                f"{action} attempt {attempt}/{attempts} failed: {e}",
                extra={"action": action, **context},
            )
            if attempt < attempts:
                if before_retry:
                    before_retry()
                time.sleep(_backoff(attempt))

    logger.error(
        f"{action} permanently failed: {last_error}",
        extra={"action": action, **context},
    )
    raise InternalError(f"Storage failure during {action}") from last_error


def try_reserve(session: Session, product_id: int, quantity: int) -> bool:
    """Guarded decrement inside the caller's transaction."""
    result = session.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity, updated_at=utcnow())
    )
    return result.rowcount == 1


def add_stock(session: Session, product_id: int, quantity: int) -> bool:
    """Unconditional increment inside the caller's transaction."""
    result = session.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock=Product.stock + quantity, updated_at=utcnow())
    )
    return result.rowcount == 1


def current_stock(session: Session, product_id: int) -> Optional[int]:
    product = session.get(Product, product_id, populate_existing=True)
    return product.stock if product else None


def reserve_stock(
    session: Session,
    product_id: int,
    quantity: int,
    journal: Optional[Journal] = None,
    before_retry: Optional[Callable[[], None]] = None,
) -> None:
    """Take ``quantity`` units or raise InsufficientStock.

    ``journal`` runs in the same transaction as a successful decrement.
    ``before_retry`` is handed to :func:`storage_retry`.
    A missing product fails the same way as an empty shelf.
    """
    if quantity < 1:
        raise ValueError("quantity must be positive")

    def unit():
        if not try_reserve(session, product_id, quantity):
            session.rollback()
            return False
        if journal:
            journal(session)
        session.commit()
        return True

    reserved = storage_retry(
        session,
        unit,
        action="reserve",
        before_retry=before_retry,
        product_id=product_id,
        quantity=quantity,
    )
    if reserved:
        logger.debug(f"Reserved {quantity} of product {product_id}")
        return

    product = session.get(Product, product_id, populate_existing=True)
    raise InsufficientStock(
        product_id=product_id,
        requested=quantity,
        available=product.stock if product else 0,
        title=product.title if product else None,
    )


def release_stock(
    session: Session,
    product_id: int,
    quantity: int,
    journal: Optional[Journal] = None,
) -> bool:
    """Give back ``quantity`` units. Not deduplicated, callers track what they released.

    Returns False when the product no longer exists.
    """
    if quantity < 1:
        raise ValueError("quantity must be positive")

    found = {"value": True}

    def unit():
        found["value"] = add_stock(session, product_id, quantity)
        if journal:
            journal(session)
        session.commit()
        return True

    storage_retry(session, unit, action="release", product_id=product_id, quantity=quantity)

    if not found["value"]:
        logger.error(
            f"Could not return {quantity} units: product {product_id} is gone",
            extra={"product_id": product_id, "quantity": quantity},
        )
    return found["value"]


def release_items(session: Session, items: Iterable[Tuple[int, int]]) -> None:
    """Increment several products inside the caller's transaction."""
    for product_id, quantity in items:
        if not add_stock(session, product_id, quantity):
            logger.error(
                f"Could not return {quantity} units: product {product_id} is gone",
                extra={"product_id": product_id, "quantity": quantity},
            )


def restock(session: Session, product_id: int, quantity: int) -> Product:
    """Admin stock intake."""
    if session.get(Product, product_id) is None:
        raise ProductNotFound(product_id)
    release_stock(session, product_id, quantity)
    product = session.get(Product, product_id, populate_existing=True)
    logger.info(f"Restocked product {product_id} by {quantity}, now {product.stock}")
    return product


def inventory_summary(session: Session, low_stock_threshold: Optional[int] = None) -> dict:
    threshold = settings.low_stock_threshold if low_stock_threshold is None else low_stock_threshold

    total = session.exec(select(func.count(Product.id))).one()

    low_stock = session.exec(
        select(func.count(Product.id)).where(Product.stock <= threshold, Product.stock > 0)
    ).one()

    out_of_stock = session.exec(
        select(func.count(Product.id)).where(Product.stock == 0)
    ).one()

    return {
        "total_products": total,
        "low_stock": low_stock,
        "out_of_stock": out_of_stock,
    }
