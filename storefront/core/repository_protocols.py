"""Boundary Protocols — contracts between core/services and the IO shell.

Invariants:
    - Services depend on these Protocols, never on concrete adapters
    - All IO operations are async; implementations live in infrastructure/

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from storefront.core.domain_types import Collection


class DocumentStore(Protocol):
    """Keyed CRUD over JSON documents grouped in collections."""
    async def create(self, collection: Collection, record_id: str, doc: dict) -> dict: ...
    async def read(self, collection: Collection, record_id: str) -> dict: ...
    async def update(self, collection: Collection, record_id: str, doc: dict) -> dict: ...
    async def delete(self, collection: Collection, record_id: str) -> None: ...
    async def list(self, collection: Collection) -> list[str]: ...


@dataclass(frozen=True)
class Charge:
    """Gateway reference for a captured payment."""
    id: str
    payment_method_details: dict[str, Any] = field(default_factory=dict)


class PaymentGateway(Protocol):
    """Captures a positive integer-cents amount from a payment source."""
    async def create_charge(
        self, *, amount: int, source: str, idempotency_key: str,
    ) -> Charge: ...


class Notifier(Protocol):
    """Delivers an email-style message."""
    async def send_message(
        self, *, to: str, subject: str, text: str, html: str,
    ) -> dict: ...


class TemplateRenderer(Protocol):
    """Renders a named template to {'html': ..., 'text': ...}."""
    def render(self, template_name: str, data: dict) -> dict[str, str]: ...
