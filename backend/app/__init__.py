"""
SchoolMap Backend - Application Package Initializer
===================================================

What: Marks the `app` directory as a Python package.
Who:  Imported by uvicorn (`app.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, envelopes
    ├─────────────────────────────────────┤
    │   Services (Gateway & Directory)    │  ← SQL statements, NEIS adapter
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never issue SQL and never talk to the NEIS API directly; they call
    a service and wrap its result in the response envelope.
"""

__version__ = "1.0.0"
