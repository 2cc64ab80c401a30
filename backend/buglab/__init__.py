"""
BugLab Backend — Application Package Initializer
=================================================

What: Marks the `buglab` directory as a Python package.
Who:  Imported by uvicorn, Alembic, the seed script and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← one transaction per operation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← async engine, pool, transaction()
    └─────────────────────────────────────┘

    Routes never open transactions themselves. Each service method acquires a
    session from the injected session factory, runs its statements inside a
    single transaction and releases the connection on every exit path.
"""

__version__ = "1.0.0"
