"""
CareNotes Backend: Application Package Initializer
====================================================

Layered architecture:

    ┌─────────────────────────────────────┐
    │  Routes + Middleware (API Layer)    │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (Validation + Pipeline)   │  ← Input contracts, integrity rules
    ├─────────────────────────────────────┤
    │  Repositories                       │  ← All SQL for one table each
    ├─────────────────────────────────────┤
    │  Models & Schemas (Data)            │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │  Database (Persistence)             │  ← Async SQLAlchemy engine/sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
