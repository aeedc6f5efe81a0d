"""Order Service — read access to a user's immutable orders.

Invariants:
    - Orders are never modified after checkout creates them
    - A session sees only orders whose email matches its own (403 otherwise)
    - Listing fails as a whole if any referenced order cannot be read
"""

from storefront.core.domain_types import Collection, OrderId, Session
from storefront.core.errors import ForbiddenError
from storefront.core.repository_protocols import DocumentStore
from storefront.services.fail_fast import gather_fail_fast


class OrderService:
    def __init__(self, store: DocumentStore):
        self._store = store

    async def get(self, order_id: OrderId, session: Session) -> dict:
        order = await self._store.read(Collection.ORDERS, order_id)
        if order.get("email") != session.email:
            raise ForbiddenError("You don't have permission to perform the action")
        return order

    async def list(self, session: Session) -> list[dict]:
        user = await self._store.read(Collection.USERS, session.email)
        return await gather_fail_fast(
            self._store.read(Collection.ORDERS, order_id)
            for order_id in user.get("orders", [])
        )
