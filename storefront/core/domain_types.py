"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Money is always Cents (int); no float ever carries a price or total
    - Collection enumerates the only persisted collections
    - Session is the resolved identity of a validated token for one request

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and directory names without custom encoders
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

Email = NewType("Email", str)
ProductId = NewType("ProductId", str)
TokenId = NewType("TokenId", str)
OrderId = NewType("OrderId", str)


# ─── Value Types ─────────────────────────────────────────────────

Cents = NewType("Cents", int)
EpochMs = NewType("EpochMs", int)


# ─── Enums ───────────────────────────────────────────────────────

class Collection(str, Enum):
    """Persisted collections — one directory each under the storage root."""
    USERS = "users"
    PRODUCTS = "products"
    TOKENS = "tokens"
    ORDERS = "orders"

    @property
    def resource_name(self) -> str:
        """Singular display name used in error messages ('users' -> 'User')."""
        return self.value[:-1].capitalize()


# Directory entries that are never records
RESERVED_ENTRIES = frozenset({".gitignore"})

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


@dataclass(frozen=True)
class Session:
    """Identity attached to a request after its token validates."""
    token_id: TokenId
    email: Email
    expires: EpochMs
