"""Pydantic Schemas — request validation for the transfer API.

Invariants:
    - Schemas validate at system boundary (user input)
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence (ADR: DDD boundary)
"""
