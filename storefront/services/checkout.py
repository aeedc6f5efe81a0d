"""Checkout Orchestrator — turns a user's cart into a charged, persisted Order.

Pipeline (each failure stops the attempt immediately):
    1. AuthCheck     token must validate                      -> 401, no side effects
    2. CartNonEmpty  cart must have lines                     -> 400, no side effects
    3. Populate      every line resolves to a product         -> 500, no side effects
    4. TotalCheck    total must be > 0                        -> 400, no side effects
    5. Charge        gateway captures `total` cents           -> 502
    6. PersistOrder  orders/<orderId> created                 -> 500, logged CRITICAL
    7. UpdateUser    order id appended, cart cleared          -> 500, logged CRITICAL
    8. Receipt       rendered and mailed, best-effort         -> logged only

Invariants:
    - Steps 2-7 run under the user's lock: concurrent checkouts of one user are
      serialized, so one cart is charged at most once
    - order.total is the pre-charge computed total and is never recomputed
    - order.items is a snapshot of the populated lines at purchase time
    - user.cart is emptied in the same write that records the order id
    - A receipt failure never turns a completed checkout into an error

Reconciliation:
    - Before charging, user.pendingCheckout records {orderId, total, fingerprint, attempt}.
      A retry of the same cart reuses that orderId, and the charge is keyed by it
      (Idempotency-Key), so a retry after a step 6/7 failure replays the original
      charge instead of capturing again
    - Once the charge succeeds its id is stored on the pending record; a retry
      that finds it skips step 5 entirely
    - A definite decline (4xx other than 409/429) bumps pendingCheckout.attempt,
      which is part of the Idempotency-Key, so the next try is a fresh gateway
      request. Ambiguous failures (5xx, timeouts, 409, 429) keep the key: the
      first request may have captured
    - If step 6 finds orders/<orderId> already written by an earlier attempt for
      the same user and total, that order is adopted
"""

import hashlib
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from storefront.config import Settings
from storefront.core.cart_summary import cart_fingerprint
from storefront.core.domain_types import Collection, Email, OrderId
from storefront.core.errors import (
    ConflictError, PersistenceError, StorefrontError, UpstreamError, ValidationError,
)
from storefront.core.receipt import Branding, build_receipt_data
from storefront.core.repository_protocols import (
    Charge, DocumentStore, Notifier, PaymentGateway, TemplateRenderer,
)
from storefront.core.security import create_random_id
from storefront.infrastructure.key_locks import KeyedLocks
from storefront.services.cart_aggregator import CartAggregator
from storefront.services.token_authority import TokenAuthority

logger = logging.getLogger(__name__)

EMPTY_CART_MESSAGE = (
    "There are no products in your cart. "
    "Please add products before creating an order."
)
ZERO_TOTAL_MESSAGE = (
    "Your cart total is $0. We cannot process orders of that amount. "
    "Please add more items to your cart before creating an order."
)
RECEIPT_TEMPLATE = "receipt"

# Idempotency conflict and rate limit: the keyed request may still capture
_AMBIGUOUS_STATUSES = frozenset({409, 429})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CheckoutOrchestrator:
    """Runs the checkout pipeline for one session at a time per user."""

    def __init__(
        self,
        store: DocumentStore,
        locks: KeyedLocks,
        tokens: TokenAuthority,
        aggregator: CartAggregator,
        gateway: PaymentGateway,
        notifier: Notifier,
        renderer: TemplateRenderer,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._locks = locks
        self._tokens = tokens
        self._aggregator = aggregator
        self._gateway = gateway
        self._notifier = notifier
        self._renderer = renderer
        self._settings = settings
        self._clock = clock
        self._branding = Branding(
            app_name=settings.app_name,
            app_url=settings.app_url,
            support_url=settings.support_url,
        )

    async def checkout(self, token_id: str | None, payment_source: str | None) -> dict:
        """Charge the session user's cart with payment_source and return the Order."""
        source = (payment_source or "").strip()
        if not source:
            raise ValidationError("Missing required fields", "token")

        session = await self._tokens.validate(token_id)
        email = session.email

        async with self._locks.hold(Collection.USERS.value, email):
            user = await self._store.read(Collection.USERS, email)
            cart = user.get("cart") or []
            if not cart:
                raise ValidationError(EMPTY_CART_MESSAGE)

            populated = await self._aggregator.populate(cart)
            summary = self._aggregator.summarize(populated)
            total = summary["total"]
            if total <= 0:
                raise ValidationError(ZERO_TOTAL_MESSAGE)

            user = await self._begin(user, cart, total)
            pending = user["pendingCheckout"]
            order_id = pending["orderId"]

            if pending.get("chargeId"):
                charge = Charge(
                    id=pending["chargeId"],
                    payment_method_details=pending.get("paymentMethodDetails") or {},
                )
                logger.info(
                    "Resuming checkout with captured charge",
                    extra={"email": email, "order_id": order_id, "charge_id": charge.id},
                )
            else:
                charge = await self._charge(user, total, source)
                user = await self._record_charge(user, charge)

            order = await self._persist_order(email, order_id, populated, total, charge)
            user = await self._finish(user, order, charge)

        logger.info(
            "Checkout completed",
            extra={"email": email, "order_id": order["id"], "charge_id": charge.id},
        )
        await self._send_receipt(order, user, charge)
        return order

    # ─── Steps ────────────────────────────────────────────────────

    async def _begin(self, user: dict, cart: list[dict], total: int) -> dict:
        """Write (or reuse) the pending checkout marker before any charge."""
        fingerprint = cart_fingerprint(cart)
        pending = user.get("pendingCheckout")
        if pending and pending.get("fingerprint") == fingerprint and pending.get("total") == total:
            return user
        if pending:
            logger.warning(
                "Superseding unfinished checkout; reconcile its charge if one exists",
                extra={
                    "email": user["email"],
                    "order_id": pending.get("orderId"),
                    "charge_id": pending.get("chargeId"),
                },
            )
        user = {
            **user,
            "pendingCheckout": {
                "orderId": OrderId(create_random_id(self._settings.id_length)),
                "total": total,
                "fingerprint": fingerprint,
                "attempt": 0,
                "startedAt": self._clock().isoformat(),
            },
        }
        await self._store.update(Collection.USERS, user["email"], user)
        return user

    async def _charge(self, user: dict, total: int, source: str) -> Charge:
        pending = user["pendingCheckout"]
        order_id = pending["orderId"]
        attempt = pending.get("attempt", 0)
        try:
            return await self._gateway.create_charge(
                amount=total,
                source=source,
                idempotency_key=_idempotency_key(order_id, attempt, source),
            )
        except UpstreamError as e:
            logger.error(
                f"Charge failed: {e.message}",
                extra={"email": user["email"], "order_id": order_id, "attempt": attempt + 1},
            )
            if _is_decline(e):
                await self._record_decline(user)
            e.public_message = "Could not create a charge for the order. Please try again."
            raise

    async def _record_decline(self, user: dict) -> None:
        pending = user["pendingCheckout"]
        user = {
            **user,
            "pendingCheckout": {**pending, "attempt": pending.get("attempt", 0) + 1},
        }
        try:
            await self._store.update(Collection.USERS, user["email"], user)
        except StorefrontError as e:
            logger.error(
                f"Could not record declined charge on user: {e.message}",
                extra={"email": user["email"], "order_id": pending["orderId"]},
            )

    async def _record_charge(self, user: dict, charge: Charge) -> dict:
        user = {
            **user,
            "pendingCheckout": {
                **user["pendingCheckout"],
                "chargeId": charge.id,
                "paymentMethodDetails": charge.payment_method_details,
            },
        }
        try:
            await self._store.update(Collection.USERS, user["email"], user)
        except StorefrontError as e:
            # Not fatal: a retry re-sends the same idempotency key
            logger.error(
                f"Could not record captured charge on user: {e.message}",
                extra={"email": user["email"], "charge_id": charge.id},
            )
        return user

    async def _persist_order(
        self, email: Email, order_id: OrderId, populated: list[dict], total: int, charge: Charge,
    ) -> dict:
        order = {
            "id": order_id,
            "email": email,
            "items": populated,
            "total": total,
            "charge": charge.id,
            "createdAt": self._clock().isoformat(),
        }
        try:
            await self._store.create(Collection.ORDERS, order_id, order)
        except ConflictError:
            return await self._adopt_existing_order(email, order_id, total, charge)
        except StorefrontError as e:
            logger.critical(
                f"Payment captured but order not persisted: {e.message}",
                extra={"email": email, "order_id": order_id, "charge_id": charge.id},
            )
            raise PersistenceError(
                e.message, "create", public_message="Could not create the new order",
            ) from e
        return order

    async def _adopt_existing_order(
        self, email: Email, order_id: OrderId, total: int, charge: Charge,
    ) -> dict:
        existing = await self._store.read(Collection.ORDERS, order_id)
        if existing.get("email") != email or existing.get("total") != total:
            logger.critical(
                "Order id already taken by a different order",
                extra={"email": email, "order_id": order_id, "charge_id": charge.id},
            )
            raise PersistenceError(
                f"order '{order_id}' exists with different contents", "create",
                public_message="Could not create the new order",
            )
        logger.info(
            "Adopting order written by an earlier attempt",
            extra={"email": email, "order_id": order_id},
        )
        return existing

    async def _finish(self, user: dict, order: dict, charge: Charge) -> dict:
        orders = list(user.get("orders", []))
        if order["id"] not in orders:
            orders.append(order["id"])
        user = {k: v for k, v in user.items() if k != "pendingCheckout"}
        user["orders"] = orders
        user["cart"] = []
        try:
            await self._store.update(Collection.USERS, user["email"], user)
        except StorefrontError as e:
            logger.critical(
                f"Order persisted but user not updated: {e.message}",
                extra={"email": user["email"], "order_id": order["id"], "charge_id": charge.id},
            )
            raise PersistenceError(
                e.message, "update", public_message="Could not update the user",
            ) from e
        return user

    async def _send_receipt(self, order: dict, user: dict, charge: Charge) -> None:
        """Render and mail the receipt; failures are logged and dropped."""
        try:
            data = build_receipt_data(
                order, user, charge.payment_method_details, self._branding,
            )
            body = self._renderer.render(RECEIPT_TEMPLATE, data)
            await self._notifier.send_message(
                to=user["email"],
                subject=f"Receipt from {self._settings.app_name}",
                text=body["text"],
                html=body["html"],
            )
        except Exception as e:
            logger.warning(
                f"Receipt not delivered: {e}",
                extra={"email": user.get("email"), "order_id": order["id"]},
                exc_info=True,
            )


def _idempotency_key(order_id: OrderId, attempt: int, source: str) -> str:
    """Stable per (order, attempt, payment source): a new card gets a fresh gateway request."""
    digest = hashlib.sha256(source.encode()).hexdigest()[:16]
    return f"checkout-{order_id}-{attempt}-{digest}"


def _is_decline(e: UpstreamError) -> bool:
    """The gateway answered and refused: nothing was captured under this key."""
    return (
        e.status_code is not None
        and 400 <= e.status_code < 500
        and e.status_code not in _AMBIGUOUS_STATUSES
    )
