"""Tests for order and payment status transitions."""

import pytest
from sqlmodel import select

from storefront.errors import InvalidTransition, OrderNotFound
from storefront.models.order_event import OrderEvent
from storefront.services.checkout_service import place_order
from storefront.services.order_state import set_order_status, set_payment_status


@pytest.fixture
def product(make_product):
    return make_product(price="25.00", stock=10)


@pytest.fixture
def order(session, customer, product, fill_cart, address):
    fill_cart(customer, (product, 2))
    return place_order(session, customer.id, address)


def walk(session, order_id, *statuses):
    for status in statuses:
        order = set_order_status(session, order_id, status)
    return order


class TestOrderStatus:
    def test_forward_flow_stamps_each_step(self, session, order):
        result = walk(session, order.id, "confirmed", "processing", "shipped", "delivered")

        assert result.order_status == "delivered"
        assert result.confirmed_at is not None
        assert result.processing_at is not None
        assert result.shipped_at is not None
        assert result.delivered_at is not None
        assert result.confirmed_at <= result.processing_at <= result.shipped_at <= result.delivered_at
        assert result.updated_at >= result.delivered_at

    def test_backwards_is_rejected(self, session, order):
        walk(session, order.id, "confirmed", "processing", "shipped", "delivered")

        with pytest.raises(InvalidTransition) as exc:
            set_order_status(session, order.id, "pending")

        assert exc.value.from_status == "delivered"
        assert exc.value.to_status == "pending"

    def test_skipping_a_step_is_rejected(self, session, order):
        with pytest.raises(InvalidTransition):
            set_order_status(session, order.id, "shipped")

        session.refresh(order)
        assert order.order_status == "pending"
        assert order.shipped_at is None

    def test_same_status_is_rejected(self, session, order):
        with pytest.raises(InvalidTransition):
            set_order_status(session, order.id, "pending")

    def test_unknown_status_is_rejected(self, session, order):
        with pytest.raises(InvalidTransition) as exc:
            set_order_status(session, order.id, "teleported")
        assert exc.value.to_status == "teleported"

    def test_admin_cancel_restores_stock(self, session, order, product, stock_of):
        assert stock_of(product) == 8

        result = set_order_status(session, order.id, "cancelled")

        assert result.order_status == "cancelled"
        assert result.cancelled_at is not None
        assert stock_of(product) == 10

    def test_cancel_after_processing_is_rejected(self, session, order, product, stock_of):
        walk(session, order.id, "confirmed", "processing")

        with pytest.raises(InvalidTransition):
            set_order_status(session, order.id, "cancelled")

        assert stock_of(product) == 8

    def test_cancelled_is_terminal(self, session, order):
        set_order_status(session, order.id, "cancelled")
        with pytest.raises(InvalidTransition):
            set_order_status(session, order.id, "confirmed")

    def test_missing_order(self, session):
        with pytest.raises(OrderNotFound):
            set_order_status(session, 404, "confirmed")

    def test_transitions_are_logged(self, session, order):
        walk(session, order.id, "confirmed", "processing")

        events = session.exec(
            select(OrderEvent).where(OrderEvent.order_id == order.id).order_by(OrderEvent.created_at)
        ).all()
        assert [e.event_type for e in events] == ["placed", "confirmed", "processing"]
        assert events[1].meta == {"from": "pending", "to": "confirmed"}


class TestPaymentStatus:
    def test_paid_confirms_pending_order(self, session, order):
        result = set_payment_status(session, order.id, "paid")

        assert result.payment_status == "paid"
        assert result.order_status == "confirmed"
        assert result.paid_at is not None
        assert result.confirmed_at is not None

    def test_paid_does_not_move_later_stages(self, session, order):
        walk(session, order.id, "confirmed", "processing")

        result = set_payment_status(session, order.id, "paid")

        assert result.payment_status == "paid"
        assert result.order_status == "processing"

    def test_paid_on_confirmed_order_keeps_confirmed_at(self, session, order):
        confirmed = set_order_status(session, order.id, "confirmed")
        first_confirmed_at = confirmed.confirmed_at

        result = set_payment_status(session, order.id, "paid")
        assert result.confirmed_at == first_confirmed_at

    def test_failed_does_not_cascade(self, session, order):
        result = set_payment_status(session, order.id, "failed")

        assert result.payment_status == "failed"
        assert result.order_status == "pending"
        assert result.paid_at is None

    def test_refund_only_after_paid(self, session, order):
        with pytest.raises(InvalidTransition):
            set_payment_status(session, order.id, "refunded")

        set_payment_status(session, order.id, "paid")
        assert set_payment_status(session, order.id, "refunded").payment_status == "refunded"

    def test_failed_is_terminal(self, session, order):
        set_payment_status(session, order.id, "failed")
        with pytest.raises(InvalidTransition) as exc:
            set_payment_status(session, order.id, "paid")
        assert exc.value.field == "payment_status"

    def test_paid_twice_is_rejected(self, session, order):
        set_payment_status(session, order.id, "paid")
        with pytest.raises(InvalidTransition):
            set_payment_status(session, order.id, "paid")
