"""Services Layer - runs core plans and reads against a RedisStore.

Invariants:
    - Services hold a RedisStore reference, never construct clients themselves
"""
