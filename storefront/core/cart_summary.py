"""Cart Summary — exact integer arithmetic over populated cart lines.

Invariants:
    - total == sum(product.price * quantity) in integer cents
    - count == sum(quantity)
    - Non-integer or boolean prices/quantities are rejected, never coerced
"""

from typing import Any, TypedDict

from storefront.core.domain_types import Cents


class CartSummary(TypedDict):
    total: Cents
    count: int
    items: list[dict[str, Any]]


def _require_int(value: object, name: str) -> int:
    # bool is an int subclass; a stored True must not count as 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, got {value!r}")
    return value


def line_total(item: dict[str, Any]) -> Cents:
    """Price of one populated line in cents."""
    price = _require_int(item["product"]["price"], "price")
    quantity = _require_int(item["quantity"], "quantity")
    return Cents(price * quantity)


def summarize(items: list[dict[str, Any]]) -> CartSummary:
    """Total and item count of a populated cart."""
    total = 0
    count = 0
    for item in items:
        total += line_total(item)
        count += _require_int(item["quantity"], "quantity")
    return {"total": Cents(total), "count": count, "items": items}


def cart_fingerprint(cart: list[dict[str, Any]]) -> list[str]:
    """Canonical productId:quantity listing used to recognise a retried checkout."""
    return sorted(f"{item['productId']}:{item['quantity']}" for item in cart)
