"""Cart Routes — the session user's cart; every response is the summarized cart."""

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_services, require_session
from storefront.core.domain_types import Session
from storefront.schemas.cart import CartItemAdd, CartItemUpdate
from storefront.schemas.envelope import ok
from storefront.services.container import Services

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])


@router.get("")
async def view_cart(
    session: Session = Depends(require_session),
    services: Services = Depends(get_services),
):
    return ok({"cart": await services.cart.view(session)})


@router.post("/items")
async def add_cart_item(
    body: CartItemAdd,
    session: Session = Depends(require_session),
    services: Services = Depends(get_services),
):
    cart = await services.cart.add_item(session, body.product_id, body.quantity)
    return ok({"cart": cart})


@router.put("/items/{product_id}")
async def update_cart_item(
    product_id: str,
    body: CartItemUpdate,
    session: Session = Depends(require_session),
    services: Services = Depends(get_services),
):
    cart = await services.cart.set_quantity(session, product_id, body.quantity)
    return ok({"cart": cart})


@router.delete("/items/{product_id}")
async def remove_cart_item(
    product_id: str,
    session: Session = Depends(require_session),
    services: Services = Depends(get_services),
):
    return ok({"cart": await services.cart.remove_item(session, product_id)})
