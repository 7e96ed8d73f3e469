"""Pydantic Schemas - validation of declarative entity type descriptions.

Invariants:
    - Schemas validate at the library boundary (dicts, JSON documents)
    - Validated schemas build core metadata; core never imports schemas

Design Decisions:
    - Separate from core/metadata.py: schemas are input contracts, metadata is
      what the mapping engine consumes
"""
