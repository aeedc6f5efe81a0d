"""User Routes — registration and own-profile read/update/delete.

Invariants:
    - Registration is public; every other route requires a session for the
      same email as the path (403 otherwise)
"""

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_services, require_session
from storefront.core.domain_types import Session
from storefront.schemas.envelope import ok
from storefront.schemas.user import UserCreate, UserUpdate
from storefront.services.container import Services

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("")
async def register_user(body: UserCreate, services: Services = Depends(get_services)):
    user = await services.users.register(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        password=body.password,
        address=body.address,
    )
    return ok({"user": user})


@router.get("/{email}")
async def get_user(
    email: str,
    session: Session = Depends(require_session),
    services: Services = Depends(get_services),
):
    return ok({"user": await services.users.get(email, session)})


@router.put("/{email}")
async def update_user(
    email: str,
    body: UserUpdate,
    session: Session = Depends(require_session),
    services: Services = Depends(get_services),
):
    user = await services.users.update(
        email, session,
        first_name=body.first_name,
        last_name=body.last_name,
        password=body.password,
        address=body.address,
    )
    return ok({"user": user})


@router.delete("/{email}")
async def delete_user(
    email: str,
    session: Session = Depends(require_session),
    services: Services = Depends(get_services),
):
    await services.users.delete(email, session)
    return ok()
