"""API Layer — FastAPI routes, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - The transport alone maps error kinds to HTTP status codes

Design Decisions:
    - Thin routes delegate to services; the principal is resolved once per request
"""
