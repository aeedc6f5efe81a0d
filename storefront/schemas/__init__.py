"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Stored documents use camelCase keys; schemas expose them unchanged
"""
