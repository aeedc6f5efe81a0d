"""Error Hierarchy — typed, categorized exceptions for every storefront failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory) and http_status
    - Validation and auth errors are raised before any IO (zero side effects)
    - Persistence and upstream errors never leak internal detail: to_response()
      uses public_message, the detailed message goes to the log only

Design Decisions:
    - Single hierarchy with StorefrontError base: FastAPI global handler catches all
    - Native exceptions replace error/value tuples; callers fail fast on the first raise
"""

from enum import Enum
from http import HTTPStatus


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTH = "auth"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"
    PERSISTENCE = "persistence"
    INTERNAL = "internal"


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        http_status: int = 500,
        public_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.http_status = http_status
        self.public_message = public_message or message

    def to_response(self) -> dict:
        """Convert to the standard error envelope."""
        return error_envelope(
            self.http_status, self.code, self.public_message, self.category,
        )


def error_envelope(
    status: int, code: str, message: str, category: ErrorCategory,
) -> dict:
    """Build the error envelope shared by domain and framework errors."""
    try:
        reason = HTTPStatus(status).phrase
    except ValueError:
        reason = HTTPStatus.INTERNAL_SERVER_ERROR.phrase
    return {
        "success": False,
        "error": {
            "statusCode": status,
            "error": reason,
            "code": code,
            "message": message,
            "category": category.value,
        },
    }


# ─── Client Errors (400-level) ──────────────────────────────────

class ValidationError(StorefrontError):
    """Malformed or missing input."""
    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION, 400,
        )
        self.field = field


class AuthError(StorefrontError):
    """Missing, invalid or expired session."""
    def __init__(self, message: str = "You must be logged in to do that"):
        super().__init__(message, "UNAUTHORIZED", ErrorCategory.AUTH, 401)


class ForbiddenError(AuthError):
    """Valid session acting on another user's resource."""
    def __init__(
        self,
        message: str = "Missing required token in header, or token is invalid",
    ):
        super().__init__(message)
        self.code = "FORBIDDEN"
        self.http_status = 403


class NotFoundError(StorefrontError):
    """Requested resource does not exist."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND, 404,
            public_message=f"Could not find the requested {resource_type}",
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(StorefrontError):
    """Create attempted on a key that already holds a record."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} '{resource_id}' already exists",
            "CONFLICT", ErrorCategory.CONFLICT, 400,
            public_message=f"A {resource_type} with that id already exists",
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Infrastructure Errors (500-level) ──────────────────────────

class PersistenceError(StorefrontError):
    """Document store IO failed."""
    def __init__(
        self,
        message: str,
        operation: str,
        public_message: str = "Could not complete the request",
    ):
        super().__init__(
            f"Store {operation} failed: {message}",
            "PERSISTENCE_ERROR", ErrorCategory.PERSISTENCE, 500,
            public_message=public_message,
        )
        self.operation = operation


class CartResolutionError(PersistenceError):
    """A cart line references a product that can no longer be read."""
    def __init__(self, product_id: str):
        super().__init__(
            f"cart references unreadable product '{product_id}'",
            "populate",
            public_message="Error populating cart items data",
        )
        self.code = "CART_RESOLUTION_ERROR"
        self.product_id = product_id


class UpstreamError(StorefrontError):
    """Payment gateway or notification API call failed."""
    def __init__(
        self,
        message: str,
        service: str,
        status_code: int | None = None,
        public_message: str = "An upstream service failed. Please try again.",
    ):
        super().__init__(
            f"{service} error: {message}",
            "UPSTREAM_ERROR", ErrorCategory.UPSTREAM, 502,
            public_message=public_message,
        )
        self.service = service
        self.status_code = status_code
