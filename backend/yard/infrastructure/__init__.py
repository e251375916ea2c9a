"""Infrastructure Layer — database, logging and live-update transport.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All storage errors mapped to the typed hierarchy in core/errors.py

Design Decisions:
    - Module-level singletons initialized in the FastAPI lifespan (no import side effects)
"""
