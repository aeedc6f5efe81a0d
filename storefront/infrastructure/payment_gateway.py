"""Payment Gateway — Stripe-compatible charge creation over the shared ApiClient.

Invariants:
    - amount is always a positive integer number of cents; anything else is
      rejected before any network call
    - currency is fixed per deployment (Settings.payment_currency)
    - Every charge carries an Idempotency-Key: replaying a key returns the
      original charge instead of capturing again
"""

import logging

from storefront.core.errors import UpstreamError, ValidationError
from storefront.core.repository_protocols import Charge
from storefront.infrastructure.http_client import ApiClient

logger = logging.getLogger(__name__)


async def create_charge(
    client: ApiClient,
    *,
    amount: int,
    source: str,
    currency: str,
    idempotency_key: str,
) -> Charge:
    """Create a charge of `amount` cents against a tokenized payment source."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError("Charge amount must be a positive integer of cents", "amount")
    if not source:
        raise ValidationError("A payment source is required", "source")

    body = await client.post_form(
        "/charges",
        {"amount": amount, "currency": currency, "source": source},
        headers={"Idempotency-Key": idempotency_key},
    )
    charge_id = body.get("id")
    if not charge_id:
        raise UpstreamError("charge response has no id", client.service)
    logger.info(
        "Charge created",
        extra={"charge_id": charge_id, "service": client.service},
    )
    return Charge(
        id=charge_id,
        payment_method_details=body.get("payment_method_details") or {},
    )


class StripeGateway:
    """Binds create_charge to one client and currency (PaymentGateway protocol)."""

    def __init__(self, client: ApiClient, currency: str):
        self._client = client
        self._currency = currency

    async def create_charge(
        self, *, amount: int, source: str, idempotency_key: str,
    ) -> Charge:
        return await create_charge(
            self._client,
            amount=amount,
            source=source,
            currency=self._currency,
            idempotency_key=idempotency_key,
        )
