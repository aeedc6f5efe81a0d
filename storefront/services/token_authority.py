"""Token Authority — issues, validates, extends and revokes bearer session tokens.

Invariants:
    - A token is valid iff its record exists and expires >= now (checked lazily on
      every use; there is no background sweep)
    - Valid -> Expired is passive; Valid/Expired -> Deleted is explicit (revoke);
      no other transitions exist, and an expired token can never be extended
    - A session may only inspect, extend or revoke tokens of its own email
    - extend is a locked read-modify-write on the token record

Design Decisions:
    - Clock injected as a callable returning epoch milliseconds (tests control time)
    - Login failures share one message for unknown email and wrong password
"""

import logging
import time
from collections.abc import Callable

from storefront.config import Settings
from storefront.core.domain_types import Collection, Email, EpochMs, Session, TokenId
from storefront.core.errors import (
    AuthError, ConflictError, ForbiddenError, NotFoundError,
    PersistenceError, ValidationError,
)
from storefront.core.repository_protocols import DocumentStore
from storefront.core.security import create_random_id, verify_password
from storefront.infrastructure.key_locks import KeyedLocks

logger = logging.getLogger(__name__)


def now_ms() -> EpochMs:
    return EpochMs(time.time_ns() // 1_000_000)


class TokenAuthority:
    """Session token lifecycle over the tokens collection."""

    def __init__(
        self,
        store: DocumentStore,
        locks: KeyedLocks,
        settings: Settings,
        clock: Callable[[], int] = now_ms,
    ):
        self._store = store
        self._locks = locks
        self._settings = settings
        self._clock = clock

    async def login(self, email: str, password: str) -> dict:
        """Check credentials and issue a fresh token."""
        try:
            user = await self._store.read(Collection.USERS, email)
        except (NotFoundError, ValidationError):
            raise ValidationError("Invalid email or password")
        if not verify_password(password, user.get("password", ""), self._settings.hash_secret):
            raise ValidationError("Invalid email or password")
        return await self.issue(Email(email))

    async def issue(self, email: Email) -> dict:
        """Create a token for email; retries on the (unlikely) id collision."""
        for attempt in range(1, self._settings.id_collision_attempts + 1):
            token_id = create_random_id(self._settings.id_length)
            token = {
                "id": token_id,
                "email": email,
                "expires": self._clock() + self._settings.session_duration_ms,
            }
            try:
                await self._store.create(Collection.TOKENS, token_id, token)
            except ConflictError:
                logger.warning(
                    "Token id collision, retrying",
                    extra={"attempt": attempt, "email": email},
                )
                continue
            logger.info("Token issued", extra={"email": email})
            return token
        raise PersistenceError(
            f"no free token id after {self._settings.id_collision_attempts} attempts",
            "create",
            public_message="Could not create the new token",
        )

    async def validate(self, token_id: str | None) -> Session:
        """Resolve a bearer token to a Session or raise AuthError."""
        if not token_id:
            raise AuthError()
        try:
            token = await self._store.read(Collection.TOKENS, token_id)
        except (NotFoundError, ValidationError):
            raise AuthError()
        if self._is_expired(token):
            raise AuthError("Your session has expired, please log in again")
        return Session(
            token_id=TokenId(token["id"]),
            email=Email(token["email"]),
            expires=EpochMs(token["expires"]),
        )

    async def authorize_for(self, token_id: str | None, email: str) -> bool:
        """True iff the token validates and belongs to email."""
        try:
            session = await self.validate(token_id)
        except AuthError:
            return False
        return session.email == email

    async def get(self, token_id: str, session: Session) -> dict:
        token = await self._store.read(Collection.TOKENS, token_id)
        self._require_owner(token, session)
        return token

    async def extend(self, token_id: str, session: Session) -> dict:
        """Push expiry to now + session duration; expired tokens stay expired."""
        async with self._locks.hold(Collection.TOKENS.value, token_id):
            token = await self._store.read(Collection.TOKENS, token_id)
            self._require_owner(token, session)
            if self._is_expired(token):
                raise ValidationError(
                    "The token has already expired and cannot be extended",
                )
            token = {
                **token,
                "expires": self._clock() + self._settings.session_duration_ms,
            }
            await self._store.update(Collection.TOKENS, token_id, token)
        logger.info("Token extended", extra={"email": session.email})
        return token

    async def revoke(self, token_id: str, session: Session) -> None:
        async with self._locks.hold(Collection.TOKENS.value, token_id):
            token = await self._store.read(Collection.TOKENS, token_id)
            self._require_owner(token, session)
            await self._store.delete(Collection.TOKENS, token_id)
        logger.info("Token revoked", extra={"email": session.email})

    def _is_expired(self, token: dict) -> bool:
        return token["expires"] < self._clock()

    @staticmethod
    def _require_owner(token: dict, session: Session) -> None:
        if token.get("email") != session.email:
            raise ForbiddenError()
