"""Order Routes — checkout and order history.

Invariants:
    - POST passes the raw session header to the orchestrator, which checks the
      payment token before the session (400 before 401)
    - History routes require a session and only ever return its own orders
"""

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_services, require_session, session_token
from storefront.core.domain_types import Session
from storefront.schemas.envelope import ok
from storefront.schemas.order import CheckoutRequest
from storefront.services.container import Services

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])


@router.post("")
async def checkout(
    body: CheckoutRequest | None = None,
    token: str | None = Depends(session_token),
    services: Services = Depends(get_services),
):
    order = await services.checkout.checkout(token, body.token if body else None)
    return ok({"order": order})


@router.get("")
async def list_orders(
    session: Session = Depends(require_session),
    services: Services = Depends(get_services),
):
    return ok({"orders": await services.orders.list(session)})


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    session: Session = Depends(require_session),
    services: Services = Depends(get_services),
):
    return ok({"order": await services.orders.get(order_id, session)})
