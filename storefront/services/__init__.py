"""Services Layer — token authority, cart aggregation, catalog/user/order use cases and checkout.

Invariants:
    - Every read-modify-write of a User or Token runs under that key's lock
    - Services raise StorefrontError subclasses; they never build HTTP responses
"""
