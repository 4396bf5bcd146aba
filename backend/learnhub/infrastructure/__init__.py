"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All external failures mapped to LearnHubError subclasses (core/errors.py)

Design Decisions:
    - Thin adapters over vendor SDKs (firebase-admin, boto3, PyJWT, bcrypt)
"""
