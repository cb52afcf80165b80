"""
API route modules for the leakage tracking service.

This package contains subrouters for:
- Auth: login, token refresh, role selection, session context, logout
- Catalog: product lines, models, leakage types, chassis lookup
- Inspections: tester submissions and inspection detail
- Repairs: repair queue, repair submission with photo, own repairs
- Admin: dashboard, overview, user and role administration
- Reports: inspection export (CSV/Excel/PDF)

Routers are included from leaktrack.api.main (under the /api/v1 prefix).
"""
