"""Order Schemas — checkout body.

`token` is the payment source token from the gateway's client-side library,
not the session token (that one travels in the `token` header). It is left
optional here so an absent or blank value reaches checkout and fails with
"Missing required fields" before any session lookup.
"""

from pydantic import BaseModel, Field


class CheckoutRequest(BaseModel):
    token: str | None = Field(None, max_length=500)
