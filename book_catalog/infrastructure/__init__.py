"""Infrastructure Layer — store client and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - Driver exceptions mapped to core/errors.py before leaving this layer
"""
