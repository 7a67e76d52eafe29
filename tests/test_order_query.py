"""Tests for order listing and lookup."""

import pytest

from storefront.errors import OrderNotFound
from storefront.services.checkout_service import place_order
from storefront.services.order_query import get_order, get_order_by_number, list_orders
from storefront.services.order_state import set_order_status


@pytest.fixture
def place(session, make_product, fill_cart, address):
    product = make_product(stock=100)

    def _place(user, quantity=1):
        fill_cart(user, (product, quantity))
        return place_order(session, user.id, address)

    return _place


def test_user_listing_is_scoped_and_newest_first(session, customer, other_customer, place):
    first = place(customer)
    second = place(customer)
    place(other_customer)

    data = list_orders(session, user_id=customer.id)

    assert data["total"] == 2
    assert data["pages"] == 1
    assert [o.id for o in data["orders"]] == [second.id, first.id]


def test_admin_listing_sees_everyone(session, customer, other_customer, place):
    place(customer)
    place(other_customer)

    assert list_orders(session)["total"] == 2


def test_admin_listing_with_customer(session, customer, other_customer, place):
    place(customer)
    place(other_customer, quantity=2)

    data = list_orders(session, with_customer=True, limit=1)

    assert data["total"] == 2
    assert data["pages"] == 2
    [(order, user)] = data["orders"]
    assert user.id == order.user_id == other_customer.id
    assert user.email == "other@example.com"


def test_pagination_math(session, customer, place):
    for _ in range(5):
        place(customer)

    page1 = list_orders(session, user_id=customer.id, page=1, limit=2)
    page3 = list_orders(session, user_id=customer.id, page=3, limit=2)

    assert page1["pages"] == 3
    assert len(page1["orders"]) == 2
    assert len(page3["orders"]) == 1
    assert page3["total"] == 5


def test_empty_listing(session, customer):
    data = list_orders(session, user_id=customer.id)
    assert data == {"orders": [], "total": 0, "pages": 0, "page": 1, "limit": 10}


def test_bad_paging_values_are_clamped(session, customer, place):
    place(customer)
    data = list_orders(session, user_id=customer.id, page=0, limit=0)
    assert data["page"] == 1
    assert data["limit"] == 10


def test_status_filter(session, customer, place):
    kept = place(customer)
    moved = place(customer)
    set_order_status(session, moved.id, "confirmed")

    pending = list_orders(session, status="pending")
    confirmed = list_orders(session, status="confirmed")

    assert [o.id for o in pending["orders"]] == [kept.id]
    assert [o.id for o in confirmed["orders"]] == [moved.id]


def test_get_order_checks_owner(session, customer, other_customer, place):
    order = place(customer)

    assert get_order(session, order.id, user_id=customer.id).id == order.id
    assert get_order(session, order.id).id == order.id
    with pytest.raises(OrderNotFound):
        get_order(session, order.id, user_id=other_customer.id)


def test_get_order_by_number(session, customer, other_customer, place):
    order = place(customer)

    found = get_order_by_number(session, order.order_number, user_id=customer.id)
    assert found.id == order.id

    with pytest.raises(OrderNotFound):
        get_order_by_number(session, order.order_number, user_id=other_customer.id)
    with pytest.raises(OrderNotFound):
        get_order_by_number(session, "ORD-NOPE-000000", user_id=customer.id)
