"""Product Routes — catalog, all behind a valid session."""

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_services, require_session
from storefront.schemas.envelope import ok
from storefront.schemas.product import ProductCreate, ProductUpdate
from storefront.services.container import Services

router = APIRouter(
    prefix="/api/v1/products", tags=["products"],
    dependencies=[Depends(require_session)],
)


@router.post("")
async def create_product(body: ProductCreate, services: Services = Depends(get_services)):
    product = await services.products.create(title=body.title, price=body.price)
    return ok({"product": product})


@router.get("")
async def list_products(services: Services = Depends(get_services)):
    return ok({"products": await services.products.list()})


@router.get("/{product_id}")
async def get_product(product_id: str, services: Services = Depends(get_services)):
    return ok({"product": await services.products.get(product_id)})


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    body: ProductUpdate,
    services: Services = Depends(get_services),
):
    product = await services.products.update(
        product_id, title=body.title, price=body.price,
    )
    return ok({"product": product})
