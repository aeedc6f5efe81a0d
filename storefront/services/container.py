"""Service Container — builds every service once from Settings and wires them together.

Invariants:
    - One FileDocumentStore and one KeyedLocks per process: every service that
      mutates a record shares the same lock registry
    - External collaborators (store, gateway, notifier, renderer) are injectable,
      so tests swap in fakes without touching the rest of the wiring
    - aclose() releases only the HTTP clients the container created itself
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from storefront.config import Settings
from storefront.core.repository_protocols import Notifier, PaymentGateway, TemplateRenderer
from storefront.infrastructure.document_store import FileDocumentStore
from storefront.infrastructure.http_client import ApiClient
from storefront.infrastructure.key_locks import KeyedLocks
from storefront.infrastructure.mailer import MailgunNotifier
from storefront.infrastructure.payment_gateway import StripeGateway
from storefront.infrastructure.templates import FileTemplateRenderer
from storefront.services.cart_aggregator import CartAggregator
from storefront.services.cart_service import CartService
from storefront.services.checkout import CheckoutOrchestrator, utc_now
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService
from storefront.services.token_authority import TokenAuthority, now_ms
from storefront.services.user_service import UserService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Services:
    settings: Settings
    store: FileDocumentStore
    locks: KeyedLocks
    tokens: TokenAuthority
    aggregator: CartAggregator
    users: UserService
    products: ProductService
    cart: CartService
    orders: OrderService
    checkout: CheckoutOrchestrator
    clients: tuple[ApiClient, ...] = field(default=())

    async def aclose(self) -> None:
        for client in self.clients:
            await client.aclose()


def _api_client(settings: Settings, base_url: str, service: str, auth: tuple[str, str]) -> ApiClient:
    return ApiClient(
        base_url,
        service=service,
        auth=auth,
        timeout_seconds=settings.http_timeout_seconds,
        max_retries=settings.http_max_retries,
        base_delay_ms=settings.http_base_delay_ms,
        max_delay_ms=settings.http_max_delay_ms,
    )


def build_services(
    settings: Settings,
    *,
    store: FileDocumentStore | None = None,
    gateway: PaymentGateway | None = None,
    notifier: Notifier | None = None,
    renderer: TemplateRenderer | None = None,
    token_clock: Callable[[], int] = now_ms,
    clock: Callable[[], datetime] = utc_now,
) -> Services:
    """Assemble the service graph; missing collaborators get production defaults."""
    clients: list[ApiClient] = []
    if store is None:
        store = FileDocumentStore(settings.storage_root)
    if gateway is None:
        payments = _api_client(
            settings, settings.payment_api_url, "payments",
            (settings.payment_api_key, ""),
        )
        clients.append(payments)
        gateway = StripeGateway(payments, settings.payment_currency)
    if notifier is None:
        mail = _api_client(
            settings, f"{settings.mail_api_url.rstrip('/')}/{settings.mail_domain}",
            "mail", ("api", settings.mail_api_key),
        )
        clients.append(mail)
        notifier = MailgunNotifier(mail, settings.mail_sender)
    if renderer is None:
        renderer = FileTemplateRenderer(settings.templates_dir)

    locks = KeyedLocks()
    tokens = TokenAuthority(store, locks, settings, clock=token_clock)
    aggregator = CartAggregator(store)
    services = Services(
        settings=settings,
        store=store,
        locks=locks,
        tokens=tokens,
        aggregator=aggregator,
        users=UserService(store, locks, settings),
        products=ProductService(store, locks, settings),
        cart=CartService(store, locks, aggregator),
        orders=OrderService(store),
        checkout=CheckoutOrchestrator(
            store, locks, tokens, aggregator, gateway, notifier, renderer,
            settings, clock=clock,
        ),
        clients=tuple(clients),
    )
    logger.debug("Services built", extra={"collection": str(store.root)})
    return services
