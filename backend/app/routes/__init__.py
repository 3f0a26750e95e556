# Routes package init
"""
CareNotes Backend: API Routes Package
=======================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - patients.py:     GET/POST /api/patients, GET/PATCH/DELETE /api/patients/{id}
    - voice_notes.py:  GET/POST /api/voice-notes, GET/DELETE /api/voice-notes/{id}
    - summaries.py:    GET/POST /api/summaries, GET/DELETE /api/summaries/{id}
    - health.py:       GET /health

Design Principle:
    Routes are THIN. They extract path/query/body values, call the
    resource's pipeline, and choose the status code. Validation, integrity
    checks and error classification live in app.services.
"""
