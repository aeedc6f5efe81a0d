"""API Layer — FastAPI routes, auth dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Every response uses the success/error envelope (schemas/envelope.py)
"""
