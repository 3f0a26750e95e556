# Services package init
"""
CareNotes Backend: Services Layer
===================================

What:  Business logic between routes (HTTP) and repositories (persistence).
How:   Services accept raw request data and sessions, apply validation and
       integrity rules, and return response models or raise CareNotesError.

Service Inventory:
    - validation.py: Per-operation input contracts (Pydantic)
    - pipeline.py:   Generic validate → check → persist → reload sequence
    - resources.py:  The configured pipeline for each resource
"""
