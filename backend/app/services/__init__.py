"""
NoteMap Backend: Services Layer
================================

What:  Business logic between the routes (HTTP) and the database/providers.
How:   Stateless singletons; collaborators are injected through the
       constructor so tests can substitute them.

Service Inventory:
    Geo
    - distance:                 haversine_miles / round_miles
    - MapsClient:               shared Google Maps HTTP transport (httpx + tenacity)
    - GeocodingService:         address → Coordinate
    - DistanceMatrixService:    driving distance/duration for one pair
    - FacilityGeocodeService:   facility-scoped geocode cache
    - FacilityMatcher:          nearest-facility search
    - RouteDistanceService:     driving + straight-line distance, partial results

    Identity
    - IdentityService:          users rows and the degraded ProfileOutcome

    Transcription
    - VisionTranscriber (abstract), GeminiTranscriber
    - FileService:              upload validation and temp files
    - EntryService:             analyze workflow and entry history
"""
