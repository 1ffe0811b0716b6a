"""
NoteMap Backend: Pydantic Request/Response Schemas
===================================================

What:  API contracts, kept separate from the SQLAlchemy models.
How:   FastAPI validates request bodies and query parameters against these
       models and serializes responses through them.

Request models forbid unknown fields, so a typo in a client payload is a
400 instead of a silently ignored value.
"""
