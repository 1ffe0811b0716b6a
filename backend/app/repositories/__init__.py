"""
NoteMap Backend: Repositories
==============================

What:  Data-access layer for tables this backend does not own outright.
How:   Async SQLAlchemy queries; driver errors are wrapped in RepositoryError
       so services never see SQLAlchemy exceptions.
"""
