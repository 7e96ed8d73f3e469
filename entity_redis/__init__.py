"""Entity Redis - object-to-key-value mapping and transactional writes over Redis.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: callers import from the layer they need
      (core, services, infrastructure, schemas)
"""
