"""
LinkUp Backend: Application Package Initializer
=================================================

What: Marks the `linkup` directory as a Python package.
Why:  Enables module imports like `from linkup.config import Settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    This backend follows the same layered architecture for every handler group:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Auth, directory, links, uploads
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Nothing lives in module-level globals: `create_app()` assembles an
    `AppContext` (settings, engine, services) and route handlers receive the
    pieces they need through FastAPI dependencies.
"""

__version__ = "1.0.0"
