"""Infrastructure Layer - Redis client ownership and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/
    - All redis-py exceptions mapped to core/errors.py types at this boundary
"""
