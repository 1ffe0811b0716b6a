"""
NoteMap Backend: Middleware Package
====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [CORS] → [GZip] → [Request ID] → [Logging] → [Identity] → Route Handler

    1. Request ID first so every later log line can carry it
    2. Logging wraps identity so the access log covers the users-row insert
    3. Identity last: routes read request.state.user_id

Responses travel the chain in reverse, so the uid cookie is set before the
access log records the status and X-Request-ID is added last.
"""
