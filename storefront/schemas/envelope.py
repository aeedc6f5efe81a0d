"""Response Envelope — the success shape shared by every route.

Errors use the matching failure shape built in core/errors.py (error_envelope).
"""

from typing import Any


def ok(payload: dict[str, Any] | None = None) -> dict[str, Any]:
    """Wrap a payload as {"success": true, "data": {...}}."""
    return {"success": True, "data": payload or {}}
