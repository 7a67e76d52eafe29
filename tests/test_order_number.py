"""Tests for order number generation."""

import re

import pytest

from storefront.services.order_number import generate_order_number, to_base36

ORDER_NUMBER = re.compile(r"^ORD-[0-9A-Z]+-[0-9A-F]{6}$")


@pytest.mark.parametrize(
    "value,expected",
    [(0, "0"), (35, "Z"), (36, "10"), (1295, "ZZ"), (1296, "100")],
)
def test_to_base36(value, expected):
    assert to_base36(value) == expected


def test_to_base36_rejects_negative():
    with pytest.raises(ValueError):
        to_base36(-1)


def test_format():
    assert ORDER_NUMBER.match(generate_order_number())


def test_timestamp_component():
    assert generate_order_number(now_ms=36).startswith("ORD-10-")


def test_numbers_differ():
    numbers = {generate_order_number(now_ms=1) for _ in range(50)}
    assert len(numbers) > 1
