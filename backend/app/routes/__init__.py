"""
NoteMap Backend: API Routes Package
====================================

Route Inventory:
    - me.py:        GET/POST /api/me      (anonymous identity profile)
    - analyze.py:   POST /api/analyze     (transcribe an uploaded image)
    - entries.py:   GET  /api/entries     (identity's transcription history)
    - distance.py:  GET  /api/distance    (driving + straight-line distance)
    - geocode.py:   POST /api/geocode     (facility / user / nearest actions)
    - health.py:    GET  /health          (service health check)

Routes stay thin: extract input, call one service, shape the response.
Errors propagate to the global handlers registered in main.py.
"""
