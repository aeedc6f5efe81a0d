"""Cart Aggregator — resolves cart lines against live products and totals them.

Invariants:
    - populate is all-or-nothing: one unreadable product fails the whole cart
      with CartResolutionError (a deleted product is never silently skipped)
    - Product reads run concurrently; the first failure cancels the rest
    - summarize is exact integer arithmetic (core/cart_summary.py)
"""

import logging

from storefront.core.cart_summary import CartSummary, summarize
from storefront.core.domain_types import Collection
from storefront.core.errors import CartResolutionError, PersistenceError, StorefrontError
from storefront.core.repository_protocols import DocumentStore
from storefront.services.fail_fast import gather_fail_fast

logger = logging.getLogger(__name__)


class CartAggregator:
    """Populates and summarizes carts stored inside User records."""

    def __init__(self, store: DocumentStore):
        self._store = store

    async def populate(self, cart_items: list[dict]) -> list[dict]:
        """Attach the current Product record to every cart line."""
        for item in cart_items:
            _check_line(item)
        return await gather_fail_fast(self._populate_line(item) for item in cart_items)

    def summarize(self, populated: list[dict]) -> CartSummary:
        try:
            return summarize(populated)
        except (TypeError, KeyError) as e:
            raise PersistenceError(
                f"unusable product data: {e}", "populate",
                public_message="Error populating cart items data",
            ) from e

    async def resolve(self, cart_items: list[dict]) -> CartSummary:
        """populate + summarize in one call."""
        return self.summarize(await self.populate(cart_items))

    async def _populate_line(self, item: dict) -> dict:
        product_id = item["productId"]
        try:
            product = await self._store.read(Collection.PRODUCTS, product_id)
        except StorefrontError as e:
            logger.warning(
                f"Cart line could not be populated: {e.message}",
                extra={"record_id": product_id, "collection": Collection.PRODUCTS.value},
            )
            raise CartResolutionError(product_id) from e
        return {"productId": product_id, "quantity": item["quantity"], "product": product}


def _check_line(item: dict) -> None:
    """Reject malformed stored lines before any product read."""
    quantity = item.get("quantity")
    if (
        not isinstance(item.get("productId"), str)
        or isinstance(quantity, bool)
        or not isinstance(quantity, int)
        or quantity <= 0
    ):
        raise PersistenceError(
            f"malformed cart line: {item!r}", "populate",
            public_message="Error populating cart items data",
        )
