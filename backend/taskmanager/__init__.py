"""Task Manager Application Package — ownership-scoped project/task backend.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
