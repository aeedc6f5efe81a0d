"""Token Routes — login, inspect, extend and revoke session tokens.

Invariants:
    - Login is public; the other routes require a session owning the token
"""

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_services, require_session
from storefront.core.domain_types import Session
from storefront.schemas.envelope import ok
from storefront.schemas.token import TokenCreate, TokenExtend
from storefront.services.container import Services

router = APIRouter(prefix="/api/v1/tokens", tags=["tokens"])


@router.post("")
async def login(body: TokenCreate, services: Services = Depends(get_services)):
    token = await services.tokens.login(body.email, body.password)
    return ok({"token": token})


@router.get("/{token_id}")
async def get_token(
    token_id: str,
    session: Session = Depends(require_session),
    services: Services = Depends(get_services),
):
    return ok({"token": await services.tokens.get(token_id, session)})


@router.put("/{token_id}")
async def extend_token(
    token_id: str,
    body: TokenExtend,
    session: Session = Depends(require_session),
    services: Services = Depends(get_services),
):
    return ok({"token": await services.tokens.extend(token_id, session)})


@router.delete("/{token_id}")
async def revoke_token(
    token_id: str,
    session: Session = Depends(require_session),
    services: Services = Depends(get_services),
):
    await services.tokens.revoke(token_id, session)
    return ok()
