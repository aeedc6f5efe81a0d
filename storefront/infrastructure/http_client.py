"""Resilient API Client — one httpx-backed client parameterized by base URL and auth.

Invariants:
    - Rate limits (429): exponential backoff with jitter, respects Retry-After header
    - Transient errors (5xx, connection, timeout): max_retries retries with backoff
    - Client errors (4xx except 429): immediate failure, no retry
    - All failures mapped to UpstreamError (core/errors.py)

Design Decisions:
    - Composition over subclassing: each external API is a set of functions that
      take an ApiClient as a capability (payment_gateway.py, mailer.py)
    - ±25% jitter on backoff: prevents thundering herd on shared rate limits
"""

import asyncio
import logging
import random
from typing import Any

import httpx

from storefront.core.errors import UpstreamError

logger = logging.getLogger(__name__)

_TRANSIENT_STATUSES = frozenset({500, 502, 503, 504})


class ApiClient:
    """Wraps httpx.AsyncClient with retry logic, timeouts, and error mapping."""

    def __init__(
        self,
        base_url: str,
        *,
        service: str,
        auth: httpx.Auth | tuple[str, str] | None = None,
        headers: dict[str, str] | None = None,
        timeout_seconds: float = 30.0,
        max_retries: int = 3,
        base_delay_ms: int = 500,
        max_delay_ms: int = 10_000,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.service = service
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            auth=auth,
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def post_form(
        self,
        path: str,
        data: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> dict:
        """POST form-encoded data, returning the decoded JSON body."""
        return await self._request("POST", path, data=data, headers=headers)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict:
        url = path.lstrip("/")
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.request(method, url, **kwargs)
            except (httpx.NetworkError, httpx.TimeoutException) as e:
                await self._handle_transient_error(e, attempt)
                continue
            except httpx.HTTPError as e:
                logger.error(
                    f"Unexpected {self.service} transport error: {e}",
                    extra={"service": self.service},
                )
                raise UpstreamError(str(e), self.service)

            if response.status_code == 429:
                await self._handle_rate_limit(response, attempt)
                continue
            if response.status_code in _TRANSIENT_STATUSES:
                await self._handle_transient_error(
                    httpx.HTTPStatusError(
                        f"status {response.status_code}",
                        request=response.request, response=response,
                    ),
                    attempt,
                    status_code=response.status_code,
                )
                continue
            if response.is_error:
                raise UpstreamError(
                    _error_detail(response), self.service,
                    status_code=response.status_code,
                )
            self._log_success(method, url, attempt)
            return _decode(response, self.service)
        # Unreachable: every failing branch either continues or raises on the last attempt
        raise UpstreamError("retries exhausted", self.service)

    def _log_success(self, method: str, url: str, attempt: int) -> None:
        logger.info(
            f"{self.service} {method} /{url} ok",
            extra={"service": self.service, "attempt": attempt + 1},
        )

    async def _handle_rate_limit(self, response: httpx.Response, attempt: int) -> None:
        """Handle rate limit response with retry or raise."""
        retry_after_ms = self._extract_retry_after(response)
        if attempt >= self.max_retries:
            raise UpstreamError(
                "Rate limit exceeded after retries", self.service, status_code=429,
            )
        delay = retry_after_ms or self._backoff(attempt)
        logger.warning(
            f"{self.service} rate limit hit, retry after {delay}ms",
            extra={"service": self.service, "attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, e: Exception, attempt: int, status_code: int | None = None,
    ) -> None:
        """Handle transient errors with retry or raise."""
        if attempt >= self.max_retries:
            raise UpstreamError(
                f"Transient failure after {self.max_retries} retries: {e}",
                self.service,
                status_code=status_code,
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"{self.service} transient error, retry after {delay}ms: {e}",
            extra={"service": self.service, "attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    @staticmethod
    def _extract_retry_after(response: httpx.Response) -> int | None:
        """Extract Retry-After header (returns milliseconds)."""
        val = response.headers.get("retry-after")
        if val and val.isdigit():
            return int(val) * 1000
        return None


def _error_detail(response: httpx.Response) -> str:
    """Best-effort error message from a JSON error body."""
    try:
        body = response.json()
    except ValueError:
        return f"status {response.status_code}"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return f"status {response.status_code}: {error['message']}"
        if body.get("message"):
            return f"status {response.status_code}: {body['message']}"
    return f"status {response.status_code}"


def _decode(response: httpx.Response, service: str) -> dict:
    try:
        body = response.json()
    except ValueError:
        raise UpstreamError("response is not JSON", service, response.status_code)
    if not isinstance(body, dict):
        raise UpstreamError("response is not a JSON object", service, response.status_code)
    return body
