"""
Public Pydantic schemas used by FastAPI routes, services, and tests.

Schemas are grouped by area (catalog, inspections, stats, auth) and also
include common reusable models such as the standard error envelope.
"""

from .common import MessageResponse  # noqa: F401
