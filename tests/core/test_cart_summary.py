"""Tests for cart summary arithmetic — pure, integer cents, no IO."""

import pytest

from storefront.core.cart_summary import cart_fingerprint, line_total, summarize


def _line(product_id, price, quantity):
    return {
        "productId": product_id,
        "quantity": quantity,
        "product": {"id": product_id, "title": product_id, "price": price},
    }


def test_empty_cart_sums_to_zero():
    assert summarize([]) == {"total": 0, "count": 0, "items": []}


def test_total_is_sum_of_price_times_quantity():
    items = [_line("a", 1250, 2), _line("b", 300, 3)]
    summary = summarize(items)
    assert summary["total"] == 1250 * 2 + 300 * 3
    assert summary["count"] == 5
    assert summary["items"] is items


def test_small_prices_accumulate_exactly():
    # 0.10 + 0.20 style sums never drift in integer cents
    items = [_line("a", 10, 1), _line("b", 20, 1)] * 50
    assert summarize(items)["total"] == 1500


def test_line_total():
    assert line_total(_line("a", 999, 3)) == 2997


@pytest.mark.parametrize("price", [12.5, "1250", True, None])
def test_non_integer_price_rejected(price):
    with pytest.raises(TypeError):
        summarize([_line("a", price, 1)])


def test_boolean_quantity_rejected():
    with pytest.raises(TypeError):
        summarize([_line("a", 100, True)])


def test_fingerprint_ignores_line_order():
    a = [{"productId": "x", "quantity": 1}, {"productId": "y", "quantity": 2}]
    b = list(reversed(a))
    assert cart_fingerprint(a) == cart_fingerprint(b) == ["x:1", "y:2"]


def test_fingerprint_changes_with_quantity():
    assert cart_fingerprint([{"productId": "x", "quantity": 1}]) != cart_fingerprint(
        [{"productId": "x", "quantity": 2}],
    )
