"""
NoteMap Backend: Facility SQLAlchemy Model
===========================================

What:  ORM model for the `facilities` table (service-provider records).
Who:   FacilityRepository reads it for search and writes geocoded
       coordinates back onto it.

The table is owned and populated by an external import process; this
backend only ever reads rows and back-fills `lat`, `lng` and `geocoded_at`
on rows that have never been geocoded.

Capability flags:
    Each capability is a plain boolean column. FACILITY_CAPABILITIES is the
    single list of their names; the matcher validates filter names against it
    and looks columns up by name, so adding a capability means adding a
    column here, a migration, and a name in the tuple.
"""

from datetime import datetime
from typing import Dict, Optional, Tuple

from sqlalchemy import Boolean, DateTime, Float, Index, String, Text, false, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

FACILITY_CAPABILITIES: Tuple[str, ...] = (
    "telehealth",
    "medicaid",
    "sliding_scale",
    "private_insurance",
    "trauma_care",
    "co_occurring",
    "serves_veterans",
    "serves_lgbtq",
    "serves_children",
    "serves_young_adults",
    "serves_seniors",
    "cbt",
    "dbt",
    "emdr",
)


def _flag() -> Mapped[bool]:
    return mapped_column(Boolean, nullable=False, default=False, server_default=false())


class Facility(Base):
    """
    A treatment or service facility searched by the facility matcher.

    Geocoding state:
        lat/lng NULL     → not yet geocoded, excluded from distance search
        lat/lng present  → cached coordinate, never re-geocoded
    """

    __tablename__ = "facilities"

    facility_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    # Region code used for exact-match filtering (US state abbreviation)
    state: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    zip: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    # ── Geocode cache columns ─────────────────────────────────────────────
    lat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    lng: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    geocoded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # ── Capability flags (keep in sync with FACILITY_CAPABILITIES) ────────
    telehealth: Mapped[bool] = _flag()
    medicaid: Mapped[bool] = _flag()
    sliding_scale: Mapped[bool] = _flag()
    private_insurance: Mapped[bool] = _flag()
    trauma_care: Mapped[bool] = _flag()
    co_occurring: Mapped[bool] = _flag()
    serves_veterans: Mapped[bool] = _flag()
    serves_lgbtq: Mapped[bool] = _flag()
    serves_children: Mapped[bool] = _flag()
    serves_young_adults: Mapped[bool] = _flag()
    serves_seniors: Mapped[bool] = _flag()
    cbt: Mapped[bool] = _flag()
    dbt: Mapped[bool] = _flag()
    emdr: Mapped[bool] = _flag()

    __table_args__ = (
        # Lets back-fill jobs find rows that still need geocoding
        Index(
            "idx_facilities_needs_geocoding",
            "geocoded_at",
            postgresql_where=text("geocoded_at IS NULL"),
            sqlite_where=text("geocoded_at IS NULL"),
        ),
    )

    @property
    def is_geocoded(self) -> bool:
        return self.lat is not None and self.lng is not None

    @property
    def capabilities(self) -> Dict[str, bool]:
        """Capability flags as a name → bool mapping."""
        return {name: bool(getattr(self, name)) for name in FACILITY_CAPABILITIES}

    def __repr__(self) -> str:
        return f"<Facility(facility_id={self.facility_id}, state='{self.state}')>"
