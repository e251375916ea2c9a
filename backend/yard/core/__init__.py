"""Core Layer — pure domain rules for the container lifecycle and zone capacity.

Invariants:
    - Core never imports from services/, infrastructure/ or api/
    - No IO, no async: every function here is deterministic and unit-testable
"""
