"""
Facility geocode cache tests against an in-memory database.
"""

import pytest

from app.exceptions import NotFoundError, ProviderError, ValidationError
from app.models.facility import Facility
from app.schemas.geo import Coordinate
from app.services.facility_geocode_service import FacilityGeocodeService

DOTHAN = Coordinate(lat=31.2232, lng=-85.3905)


class TestResolve:
    @pytest.mark.asyncio
    async def test_unknown_facility_is_not_found(self, db_session, fake_geocoder):
        service = FacilityGeocodeService(geocoder=fake_geocoder)
        with pytest.raises(NotFoundError):
            await service.resolve(db_session, "missing")
        assert fake_geocoder.calls == []

    @pytest.mark.asyncio
    async def test_cached_coordinate_is_returned_without_geocoding(
        self, db_session, fake_geocoder, make_facility
    ):
        db_session.add(make_facility("f1", lat=10.0, lng=20.0))
        await db_session.commit()

        resolved = await FacilityGeocodeService(geocoder=fake_geocoder).resolve(db_session, "f1")

        assert resolved.cached is True
        assert resolved.coordinate == Coordinate(lat=10.0, lng=20.0)
        assert fake_geocoder.calls == []

    @pytest.mark.asyncio
    async def test_miss_geocodes_once_and_persists(self, db_session, fake_geocoder, make_facility):
        db_session.add(make_facility("f1", address="219 Dothan Rd"))
        await db_session.commit()
        fake_geocoder.results["219 Dothan Rd"] = DOTHAN
        service = FacilityGeocodeService(geocoder=fake_geocoder)

        first = await service.resolve(db_session, "f1")
        second = await service.resolve(db_session, "f1")

        assert first.cached is False
        assert second.cached is True
        assert first.coordinate == second.coordinate == DOTHAN
        assert fake_geocoder.calls == ["219 Dothan Rd"]

        stored = await db_session.get(Facility, "f1")
        assert stored.lat == DOTHAN.lat
        assert stored.lng == DOTHAN.lng
        assert stored.geocoded_at is not None

    @pytest.mark.asyncio
    async def test_facility_address_wins_over_caller_address(
        self, db_session, fake_geocoder, make_facility
    ):
        db_session.add(make_facility("f1", address="219 Dothan Rd"))
        await db_session.commit()
        fake_geocoder.results["219 Dothan Rd"] = DOTHAN

        await FacilityGeocodeService(geocoder=fake_geocoder).resolve(
            db_session, "f1", address="somewhere else"
        )

        assert fake_geocoder.calls == ["219 Dothan Rd"]

    @pytest.mark.asyncio
    async def test_caller_address_used_when_record_has_none(
        self, db_session, fake_geocoder, make_facility
    ):
        db_session.add(make_facility("f1", address=None))
        await db_session.commit()
        fake_geocoder.results["100 Oak St Dothan AL"] = DOTHAN

        resolved = await FacilityGeocodeService(geocoder=fake_geocoder).resolve(
            db_session, "f1", address="100 Oak St Dothan AL"
        )

        assert resolved.coordinate == DOTHAN

    @pytest.mark.asyncio
    async def test_no_address_anywhere_is_validation_error(
        self, db_session, fake_geocoder, make_facility
    ):
        db_session.add(make_facility("f1", address=None))
        await db_session.commit()

        with pytest.raises(ValidationError):
            await FacilityGeocodeService(geocoder=fake_geocoder).resolve(db_session, "f1")
        assert fake_geocoder.calls == []

    @pytest.mark.asyncio
    async def test_geocoder_failure_writes_nothing(self, db_session, fake_geocoder, make_facility):
        db_session.add(make_facility("f1", address="219 Dothan Rd"))
        await db_session.commit()
        fake_geocoder.results["219 Dothan Rd"] = ProviderError("UNKNOWN_ERROR")

        with pytest.raises(ProviderError):
            await FacilityGeocodeService(geocoder=fake_geocoder).resolve(db_session, "f1")

        stored = await db_session.get(Facility, "f1")
        assert stored.lat is None
        assert stored.lng is None
        assert stored.geocoded_at is None
