"""Route Modules — one file per resource (users, tokens, products, cart, orders, health).

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes never contain business logic (delegate to services)
"""
