"""Tests for customer cancellation and stock restoration."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlmodel import Session

from storefront.errors import OrderCannotCancel, OrderNotFound
from storefront.services.checkout_service import place_order
from storefront.services.order_cancellation import cancel_order
from storefront.services.order_state import set_order_status, set_payment_status


@pytest.fixture
def products(make_product):
    return make_product(title="Laptop", price="900.00", stock=4), make_product(title="Mouse", price="20.00", stock=9)


@pytest.fixture
def order(session, customer, products, fill_cart, address):
    laptop, mouse = products
    fill_cart(customer, (laptop, 1), (mouse, 3))
    return place_order(session, customer.id, address)


def test_round_trip_restores_stock(session, customer, order, products, stock_of):
    laptop, mouse = products
    assert (stock_of(laptop), stock_of(mouse)) == (3, 6)

    cancelled = cancel_order(session, order.id, user_id=customer.id)

    assert cancelled.order_status == "cancelled"
    assert cancelled.cancelled_at is not None
    assert (stock_of(laptop), stock_of(mouse)) == (4, 9)


def test_confirmed_order_can_be_cancelled(session, customer, order, products, stock_of):
    set_order_status(session, order.id, "confirmed")

    cancel_order(session, order.id, user_id=customer.id)

    assert stock_of(products[0]) == 4


def test_shipped_order_cannot_be_cancelled(session, customer, order, products, stock_of):
    for status in ("confirmed", "processing", "shipped"):
        set_order_status(session, order.id, status)

    with pytest.raises(OrderCannotCancel) as exc:
        cancel_order(session, order.id, user_id=customer.id)

    assert exc.value.current_status == "shipped"
    assert (stock_of(products[0]), stock_of(products[1])) == (3, 6)


def test_second_cancel_does_not_release_again(session, customer, order, products, stock_of):
    cancel_order(session, order.id, user_id=customer.id)

    with pytest.raises(OrderCannotCancel) as exc:
        cancel_order(session, order.id, user_id=customer.id)

    assert exc.value.current_status == "cancelled"
    assert (stock_of(products[0]), stock_of(products[1])) == (4, 9)


def test_concurrent_cancels_release_once(engine, session, customer, order, products, stock_of):
    order_id, user_id = order.id, customer.id
    barrier = threading.Barrier(2)

    def cancel(_):
        with Session(engine) as s:
            barrier.wait()
            try:
                return cancel_order(s, order_id, user_id=user_id).order_status
            except OrderCannotCancel as e:
                return e

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(cancel, range(2)))

    assert results.count("cancelled") == 1
    [lost] = [r for r in results if isinstance(r, OrderCannotCancel)]
    assert lost.current_status == "cancelled"
    assert (stock_of(products[0]), stock_of(products[1])) == (4, 9)


def test_cannot_cancel_someone_elses_order(session, other_customer, order, products, stock_of):
    with pytest.raises(OrderNotFound):
        cancel_order(session, order.id, user_id=other_customer.id)
    assert stock_of(products[0]) == 3


def test_cancel_keeps_payment_status(session, customer, order):
    set_payment_status(session, order.id, "paid")

    cancelled = cancel_order(session, order.id, user_id=customer.id)

    assert cancelled.order_status == "cancelled"
    assert cancelled.payment_status == "paid"
    assert cancelled.paid_at is not None
