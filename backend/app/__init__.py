"""
NoteMap Backend: Application Package
=====================================

What: Marks the `app` directory as a Python package.
Who:  Imported by uvicorn (`app.main:app`), Alembic, and pytest.

Architecture Note:
    The backend is layered the same way for every feature:

    ┌─────────────────────────────────────┐
    │      Routes + Middleware (HTTP)     │  ← cookies, status codes, parsing
    ├─────────────────────────────────────┤
    │        Services (Business Logic)    │  ← geocoding, matching, transcription
    ├─────────────────────────────────────┤
    │   Repositories / Models / Schemas   │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    External providers (Google Maps, Gemini) are only ever reached from the
    services layer, so routes never see provider-specific payloads.
"""

__version__ = "1.0.0"
