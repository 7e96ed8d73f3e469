"""Core Layer - pure mapping logic, no IO, no async, no Redis client.

Invariants:
    - No module in core/ imports from services/, infrastructure/, or schemas/
    - All functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: key names, encodings and
      batch plans are computed here, executed by services/
"""
