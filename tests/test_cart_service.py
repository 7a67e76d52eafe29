"""Tests for the cart staging area."""

from decimal import Decimal

import pytest

from storefront.errors import CartItemNotFound, InsufficientStock, InvalidQuantity, ProductNotFound
from storefront.services import cart_service


def test_cart_is_created_lazily(session, customer):
    cart = cart_service.get_cart(session, customer.id)
    assert cart.id is not None
    assert cart.items == []
    assert cart_service.get_cart(session, customer.id).id == cart.id


def test_add_merges_and_totals(session, customer, make_product):
    tv = make_product(title="TV", price="300.00", stock=5)
    hdmi = make_product(title="HDMI", price="7.50", stock=50)

    cart_service.add_to_cart(session, customer.id, tv.id, 1)
    cart_service.add_to_cart(session, customer.id, hdmi.id, 2)
    cart = cart_service.add_to_cart(session, customer.id, tv.id, 1)

    assert [(i.product_id, i.quantity) for i in cart.items] == [(tv.id, 2), (hdmi.id, 2)]
    assert cart.total_amount == Decimal("615.00")


def test_add_checks_stock_for_merged_quantity(session, customer, make_product):
    product = make_product(stock=3)
    cart_service.add_to_cart(session, customer.id, product.id, 2)

    with pytest.raises(InsufficientStock) as exc:
        cart_service.add_to_cart(session, customer.id, product.id, 2)
    assert exc.value.available == 3


def test_add_unknown_product(session, customer):
    with pytest.raises(ProductNotFound):
        cart_service.add_to_cart(session, customer.id, 12345, 1)


def test_add_rejects_zero_quantity(session, customer, make_product):
    product = make_product()
    with pytest.raises(InvalidQuantity):
        cart_service.add_to_cart(session, customer.id, product.id, 0)


def test_update_refreshes_price(session, customer, make_product):
    product = make_product(price="10.00", stock=10)
    cart_service.add_to_cart(session, customer.id, product.id, 1)

    product.price = Decimal("11.00")
    session.add(product)
    session.commit()

    cart = cart_service.update_cart_item(session, customer.id, product.id, 3)
    assert cart.items[0].quantity == 3
    assert cart.total_amount == Decimal("33.00")


def test_update_missing_item(session, customer, make_product):
    product = make_product()
    with pytest.raises(CartItemNotFound):
        cart_service.update_cart_item(session, customer.id, product.id, 1)


def test_remove(session, customer, make_product):
    a = make_product(price="1.00")
    b = make_product(price="2.00")
    cart_service.add_to_cart(session, customer.id, a.id, 1)
    cart_service.add_to_cart(session, customer.id, b.id, 1)

    cart = cart_service.remove_from_cart(session, customer.id, a.id)

    assert [i.product_id for i in cart.items] == [b.id]
    assert cart.total_amount == Decimal("2.00")


def test_clear_keeps_cart(session, customer, make_product):
    product = make_product()
    cart = cart_service.add_to_cart(session, customer.id, product.id, 2)

    cleared = cart_service.clear_cart(session, customer.id)

    assert cleared.id == cart.id
    assert cleared.items == []
    assert cleared.total_amount == Decimal("0.00")
