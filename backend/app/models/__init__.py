"""
NoteMap Backend: ORM Models
============================

Importing this package registers every table on `Base.metadata`, which is
what Alembic --autogenerate and the test-suite's create_all() rely on.
"""

from app.models.entry import Entry
from app.models.facility import FACILITY_CAPABILITIES, Facility
from app.models.user import User

__all__ = ["Entry", "Facility", "FACILITY_CAPABILITIES", "User"]
