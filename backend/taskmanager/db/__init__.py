"""Database Infrastructure — SQLAlchemy declarative Base.

Invariants:
    - Single declarative Base for every ORM model
"""
