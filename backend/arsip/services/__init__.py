"""Services Layer — async shell around the transfer core.

Invariants:
    - Services own IO (AsyncSession, notifications); decisions come from core/
    - Workflow operations return result dicts, never raise to callers

Design Decisions:
    - One service per collaborator for locality (ADR: ExMA no god objects)
"""
