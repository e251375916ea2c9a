"""Services Layer — storage-backed registry, ledger and the allocation engine.

Invariants:
    - Only AllocationEngine opens units of work that mutate zone load or container binding
    - Registry and ledger operate on the AsyncSession they are given, never commit

Design Decisions:
    - Shell around the pure core: services do IO, core/ decides
"""
