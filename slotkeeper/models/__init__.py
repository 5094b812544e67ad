"""
Database models for SlotKeeper.
"""

from .booking import Booking

__all__ = ["Booking"]
