"""User Service — registration and own-profile management.

Invariants:
    - A user is keyed by email (case-sensitive); register never overwrites
    - Only the session owning an email may read, change or delete that user
    - Updates are full-record read-modify-writes under the user's lock
    - The password hash and checkout bookkeeping never leave this service
"""

import logging

from storefront.config import Settings
from storefront.core.domain_types import Collection, Email, Session
from storefront.core.errors import ForbiddenError, ValidationError
from storefront.core.repository_protocols import DocumentStore
from storefront.core.security import hash_password
from storefront.infrastructure.key_locks import KeyedLocks

logger = logging.getLogger(__name__)

_PRIVATE_FIELDS = ("password", "pendingCheckout")


def public_user(user: dict) -> dict:
    return {k: v for k, v in user.items() if k not in _PRIVATE_FIELDS}


def require_owner(session: Session, email: str) -> None:
    if session.email != email:
        raise ForbiddenError()


class UserService:
    def __init__(self, store: DocumentStore, locks: KeyedLocks, settings: Settings):
        self._store = store
        self._locks = locks
        self._settings = settings

    async def register(
        self, *, first_name: str, last_name: str, email: str, password: str, address: str,
    ) -> dict:
        user = {
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "password": hash_password(password, self._settings.hash_secret),
            "address": address,
            "cart": [],
            "orders": [],
        }
        await self._store.create(Collection.USERS, email, user)
        logger.info("User registered", extra={"email": email})
        return public_user(user)

    async def get(self, email: str, session: Session) -> dict:
        require_owner(session, email)
        return public_user(await self._store.read(Collection.USERS, email))

    async def update(
        self,
        email: str,
        session: Session,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        password: str | None = None,
        address: str | None = None,
    ) -> dict:
        if not any((first_name, last_name, password, address)):
            raise ValidationError("Missing fields to update")
        require_owner(session, email)
        async with self._locks.hold(Collection.USERS.value, email):
            user = await self._store.read(Collection.USERS, Email(email))
            if first_name:
                user["firstName"] = first_name
            if last_name:
                user["lastName"] = last_name
            if password:
                user["password"] = hash_password(password, self._settings.hash_secret)
            if address:
                user["address"] = address
            await self._store.update(Collection.USERS, email, user)
        logger.info("User updated", extra={"email": email})
        return public_user(user)

    async def delete(self, email: str, session: Session) -> None:
        require_owner(session, email)
        async with self._locks.hold(Collection.USERS.value, email):
            await self._store.delete(Collection.USERS, email)
        logger.info("User deleted", extra={"email": email})
