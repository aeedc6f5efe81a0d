"""Test Fakes — in-memory payment gateway, notifier, clock and a fault-injecting store.

Invariants:
    - FakeGateway replays the first outcome for a repeated idempotency key
      (charge or decline), like a real gateway does; `calls` records every request
    - FakeNotifier records every message; both can be told to fail
    - FaultyStore delegates to a real store except for the failures queued on it
"""

from storefront.core.errors import UpstreamError
from storefront.core.repository_protocols import Charge

CARD = {"card": {"brand": "visa", "last4": "4242"}}
START_MS = 1_700_000_000_000


class FakeClock:
    """Epoch-millisecond clock for TokenAuthority."""

    def __init__(self, now_ms: int):
        self.now = now_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeGateway:
    """Stores the first outcome per idempotency key, declines included."""

    def __init__(self):
        self.calls: list[dict] = []
        self.outcomes: dict[str, Charge | Exception] = {}
        self.fail_with: Exception | None = None

    @property
    def captured(self) -> int:
        """Distinct charges actually captured."""
        return sum(isinstance(o, Charge) for o in self.outcomes.values())

    async def create_charge(self, *, amount, source, idempotency_key) -> Charge:
        self.calls.append(
            {"amount": amount, "source": source, "idempotency_key": idempotency_key},
        )
        if idempotency_key not in self.outcomes:
            if self.fail_with is not None:
                self.outcomes[idempotency_key] = self.fail_with
            else:
                self.outcomes[idempotency_key] = Charge(
                    id=f"ch_{self.captured + 1}", payment_method_details=CARD,
                )
        outcome = self.outcomes[idempotency_key]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeNotifier:
    def __init__(self):
        self.messages: list[dict] = []
        self.fail_with: Exception | None = None

    async def send_message(self, *, to, subject, text, html) -> dict:
        if self.fail_with is not None:
            raise self.fail_with
        self.messages.append({"to": to, "subject": subject, "text": text, "html": html})
        return {"id": f"<msg-{len(self.messages)}@test>", "message": "Queued. Thank you."}


class FaultyStore:
    """Wraps a document store; queued (operation, collection) pairs raise once."""

    def __init__(self, inner):
        self._inner = inner
        self._faults: list[dict] = []
        self.root = inner.root

    def fail_next(
        self, operation: str, collection: str, exc: Exception, skip: int = 0,
    ) -> None:
        """Raise exc on a matching call, after letting `skip` matching calls through."""
        self._faults.append(
            {"op": operation, "collection": collection, "exc": exc, "skip": skip},
        )

    def _maybe_fail(self, operation: str, collection) -> None:
        name = getattr(collection, "value", collection)
        for idx, fault in enumerate(self._faults):
            if fault["op"] != operation or fault["collection"] != name:
                continue
            if fault["skip"]:
                fault["skip"] -= 1
                return
            del self._faults[idx]
            raise fault["exc"]

    async def create(self, collection, record_id, doc):
        self._maybe_fail("create", collection)
        return await self._inner.create(collection, record_id, doc)

    async def read(self, collection, record_id):
        self._maybe_fail("read", collection)
        return await self._inner.read(collection, record_id)

    async def update(self, collection, record_id, doc):
        self._maybe_fail("update", collection)
        return await self._inner.update(collection, record_id, doc)

    async def delete(self, collection, record_id):
        self._maybe_fail("delete", collection)
        return await self._inner.delete(collection, record_id)

    async def list(self, collection):
        self._maybe_fail("list", collection)
        return await self._inner.list(collection)

    async def health_check(self):
        return await self._inner.health_check()


def gateway_down() -> UpstreamError:
    return UpstreamError("status 402: Your card was declined.", "payments", status_code=402)


def gateway_unavailable() -> UpstreamError:
    return UpstreamError(
        "Transient failure after 3 retries: status 503", "payments", status_code=503,
    )
