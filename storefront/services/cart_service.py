"""Cart Service — add, change, remove and view the lines of a user's cart.

Invariants:
    - The cart belongs to the session's email; no other user's cart is reachable
    - Quantities are positive integers; adding an existing product sums quantities
    - Every mutation is a read-modify-write of the whole User under its lock
    - Every response is the freshly populated and summarized cart (fails closed)
"""

import logging

from storefront.core.cart_summary import CartSummary
from storefront.core.domain_types import Collection, ProductId, Session
from storefront.core.errors import ValidationError
from storefront.core.repository_protocols import DocumentStore
from storefront.infrastructure.key_locks import KeyedLocks
from storefront.services.cart_aggregator import CartAggregator

logger = logging.getLogger(__name__)

_NOT_IN_CART = "Could not find the product in the users cart"


def _find_line(cart: list[dict], product_id: ProductId) -> int:
    for idx, item in enumerate(cart):
        if item["productId"] == product_id:
            return idx
    return -1


class CartService:
    def __init__(self, store: DocumentStore, locks: KeyedLocks, aggregator: CartAggregator):
        self._store = store
        self._locks = locks
        self._aggregator = aggregator

    async def view(self, session: Session) -> CartSummary:
        user = await self._store.read(Collection.USERS, session.email)
        return await self._aggregator.resolve(user.get("cart", []))

    async def add_item(self, session: Session, product_id: ProductId, quantity: int) -> CartSummary:
        _check_quantity(quantity)
        await self._store.read(Collection.PRODUCTS, product_id)
        async with self._locks.hold(Collection.USERS.value, session.email):
            user = await self._store.read(Collection.USERS, session.email)
            cart = user.setdefault("cart", [])
            idx = _find_line(cart, product_id)
            if idx == -1:
                cart.append({"productId": product_id, "quantity": quantity})
            else:
                cart[idx]["quantity"] += quantity
            await self._store.update(Collection.USERS, session.email, user)
        logger.info("Cart item added", extra={"email": session.email, "record_id": product_id})
        return await self._aggregator.resolve(user["cart"])

    async def set_quantity(self, session: Session, product_id: ProductId, quantity: int) -> CartSummary:
        _check_quantity(quantity)
        await self._store.read(Collection.PRODUCTS, product_id)
        async with self._locks.hold(Collection.USERS.value, session.email):
            user = await self._store.read(Collection.USERS, session.email)
            cart = user.get("cart", [])
            idx = _find_line(cart, product_id)
            if idx == -1:
                raise ValidationError(_NOT_IN_CART)
            cart[idx]["quantity"] = quantity
            await self._store.update(Collection.USERS, session.email, user)
        return await self._aggregator.resolve(cart)

    async def remove_item(self, session: Session, product_id: ProductId) -> CartSummary:
        async with self._locks.hold(Collection.USERS.value, session.email):
            user = await self._store.read(Collection.USERS, session.email)
            cart = user.get("cart", [])
            idx = _find_line(cart, product_id)
            if idx == -1:
                raise ValidationError(_NOT_IN_CART)
            user["cart"] = cart[:idx] + cart[idx + 1:]
            await self._store.update(Collection.USERS, session.email, user)
        return await self._aggregator.resolve(user["cart"])


def _check_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Quantity must be a positive integer", "quantity")
