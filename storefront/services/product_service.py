"""Product Service — catalog create/read/list/update.

Invariants:
    - price is a positive integer of cents
    - Product ids are generated (id_length chars of [a-z0-9]) and never reused
    - list fails as a whole if any listed product cannot be read
"""

import logging

from storefront.config import Settings
from storefront.core.domain_types import Collection, ProductId
from storefront.core.errors import ConflictError, PersistenceError, ValidationError
from storefront.core.repository_protocols import DocumentStore
from storefront.core.security import create_random_id
from storefront.infrastructure.key_locks import KeyedLocks
from storefront.services.fail_fast import gather_fail_fast

logger = logging.getLogger(__name__)


class ProductService:
    def __init__(self, store: DocumentStore, locks: KeyedLocks, settings: Settings):
        self._store = store
        self._locks = locks
        self._settings = settings

    async def create(self, *, title: str, price: int) -> dict:
        for _ in range(self._settings.id_collision_attempts):
            product = {
                "id": ProductId(create_random_id(self._settings.id_length)),
                "title": title,
                "price": price,
            }
            try:
                await self._store.create(Collection.PRODUCTS, product["id"], product)
            except ConflictError:
                continue
            logger.info("Product created", extra={"record_id": product["id"]})
            return product
        raise PersistenceError(
            "no free product id", "create",
            public_message="Could not create the new product",
        )

    async def get(self, product_id: ProductId) -> dict:
        return await self._store.read(Collection.PRODUCTS, product_id)

    async def list(self) -> list[dict]:
        ids = await self._store.list(Collection.PRODUCTS)
        return await gather_fail_fast(
            self._store.read(Collection.PRODUCTS, product_id) for product_id in ids
        )

    async def update(
        self, product_id: ProductId, *, title: str | None = None, price: int | None = None,
    ) -> dict:
        if not title and not price:
            raise ValidationError("Missing fields to update")
        async with self._locks.hold(Collection.PRODUCTS.value, product_id):
            product = await self._store.read(Collection.PRODUCTS, product_id)
            if title:
                product["title"] = title
            if price:
                product["price"] = price
            await self._store.update(Collection.PRODUCTS, product_id, product)
        return product
