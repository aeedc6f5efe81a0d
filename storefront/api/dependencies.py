"""Route Dependencies — service container access and session resolution.

Invariants:
    - get_services reads the container built in the lifespan (app.state.services);
      tests override this dependency instead of patching modules
    - require_session validates the `token` request header on every call
      (expiry is checked lazily, never cached)
"""

from fastapi import Depends, Header, Request

from storefront.core.domain_types import Session
from storefront.services.container import Services


def get_services(request: Request) -> Services:
    return request.app.state.services


def session_token(token: str | None = Header(None)) -> str | None:
    """Raw session token header; may be absent."""
    return token


async def require_session(
    token: str | None = Depends(session_token),
    services: Services = Depends(get_services),
) -> Session:
    """Resolve the request's session or raise AuthError (401)."""
    return await services.tokens.validate(token)
