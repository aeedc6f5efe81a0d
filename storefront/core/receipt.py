"""Receipt Data — pure construction of the values a purchase receipt displays.

Invariants:
    - format_money uses integer division only (no float rounding)
    - Whole-dollar amounts drop the cents ("$12"), others keep two digits ("$12.50")
    - build_receipt_data reads the order snapshot, never live product records
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from storefront.core.cart_summary import line_total


@dataclass(frozen=True)
class Branding:
    app_name: str
    app_url: str
    support_url: str


def format_money(cents: int) -> str:
    """Format integer cents as a USD amount."""
    sign = "-" if cents < 0 else ""
    dollars, rest = divmod(abs(cents), 100)
    if rest == 0:
        return f"{sign}${dollars:,}"
    return f"{sign}${dollars:,}.{rest:02d}"


def card_label(payment_method_details: dict[str, Any] | None) -> str:
    """'visa **4242' style label; falls back when the gateway omits card data."""
    card = (payment_method_details or {}).get("card") or {}
    brand = card.get("brand")
    last4 = card.get("last4")
    if not brand or not last4:
        return "card"
    return f"{brand} **{last4}"


def build_receipt_data(
    order: dict[str, Any],
    user: dict[str, Any],
    payment_method_details: dict[str, Any] | None,
    branding: Branding,
) -> dict[str, Any]:
    created_at = datetime.fromisoformat(order["createdAt"])
    return {
        "app_name": branding.app_name,
        "app_url": branding.app_url,
        "support_url": branding.support_url,
        "purchase_date": created_at.strftime("%a, %d %b %Y %H:%M:%S UTC"),
        "name": f"{user['firstName']} {user['lastName']}",
        "total": format_money(order["total"]),
        "payment_method": card_label(payment_method_details),
        "purchase_id": order["id"],
        "purchase_items": [
            {
                "description": f"{item['product']['title']} x{item['quantity']}u",
                "amount": format_money(line_total(item)),
            }
            for item in order["items"]
        ],
    }
