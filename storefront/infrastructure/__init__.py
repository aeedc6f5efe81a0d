"""Infrastructure Layer — file storage, locks, HTTP API clients and logging.

Invariants:
    - All external calls wrapped with retry/timeout/error mapping
    - OS and HTTP failures surface as StorefrontError subclasses (core/errors.py)
"""
