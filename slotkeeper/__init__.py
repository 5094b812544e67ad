"""SlotKeeper: booking requests with administrator review."""

__version__ = "1.0.0"
