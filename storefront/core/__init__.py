"""Core Layer — pure domain logic, no IO, no async.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - Money is integer cents everywhere in core/
"""
