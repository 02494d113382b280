"""Services Layer — one service class per resource, one transaction per operation.

Invariants:
    - Every public method receives an AuthenticatedPrincipal (except auth flows)
    - Every mutating method commits exactly once, at the end
    - Errors propagate unchanged to the transport
"""
