"""Infrastructure Layer — database, logging, security and storage adapters.

Invariants:
    - Implements the Protocols in core/repository_protocols.py
    - Never contains business rules
"""
