"""Structured Logging — JSON lines with per-request context for the storefront.

Invariants:
    - Every line carries timestamp, level, logger and message
    - Request context (request_id, method, path) is bound once per request and
      stamped on every record logged while serving it; explicit extras win
    - Only known fields are emitted: bearer tokens, passwords and payment
      sources are never logged, so they are not in _EXTRA_FIELDS
    - httpx/httpcore request lines are held at WARNING: their URLs carry the
      mail domain and would duplicate the ApiClient's own log lines

Design Decisions:
    - Context lives in a ContextVar, so concurrent requests on one event loop
      never see each other's request_id
    - log_requests is a plain http middleware function; main.py registers it
"""

import json
import logging
import time
import uuid
from contextvars import ContextVar, Token
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_EXTRA_FIELDS = (
    "request_id", "method", "path", "status", "duration_ms",
    "email", "order_id", "charge_id", "collection", "record_id",
    "error_code", "attempt", "service",
)
_QUIET_LOGGERS = ("httpx", "httpcore")
REQUEST_ID_HEADER = "X-Request-Id"

_context: ContextVar[dict] = ContextVar("log_context", default={})


def bind_context(**fields) -> Token:
    """Add fields to every record logged in the current context."""
    return _context.set({**_context.get(), **fields})


def reset_context(token: Token) -> None:
    _context.reset(token)


class JSONFormatter(logging.Formatter):
    """One JSON object per line: base fields, bound context, then known extras."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        bound = _context.get()
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key, bound.get(key))
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure root logging for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.handlers = [handler]
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


async def log_requests(request, call_next):
    """Bind request context, log the outcome, echo the request id."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:16]
    token = bind_context(
        request_id=request_id, method=request.method, path=request.url.path,
    )
    started = time.perf_counter()
    try:
        response = await call_next(request)
        logger.info(
            "Request handled",
            extra={
                "status": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            },
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
    finally:
        reset_context(token)
