"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy queries for each table group. Failures
raised by the driver are re-raised as leaktrack.core.exceptions.StoreError so
that the API can answer with a single error shape.
"""
