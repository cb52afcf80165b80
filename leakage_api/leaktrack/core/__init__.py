"""
Core application utilities for settings, security and FastAPI dependencies.

This package provides:
- Application-level settings (separate from DB settings)
- Token and password helpers
- Dependency helpers (DB session, session context, role guards)
"""
