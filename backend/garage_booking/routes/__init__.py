# backend/garage_booking/routes/__init__.py
"""HTTP routes: unversioned operational endpoints plus the versioned API under v1."""
