"""
API v1 Routes

Versioned API endpoints under /v1.
"""

from . import bookings

__all__ = ["bookings"]
