"""Service Layer — request-scoped orchestration over the ORM.

Invariants:
    - Services receive an AsyncSession and own the transaction boundary (commit)
    - Pure decisions delegated to core/; IO adapters injected (push, storage)
"""
