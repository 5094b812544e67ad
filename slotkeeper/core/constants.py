"""Application-wide constants for SlotKeeper."""

BRAND_NAME = "Booking System"

# Booking field constraints
MAX_NAME_LENGTH = 120
MAX_TYPE_LENGTH = 100
MAX_NOTES_LENGTH = 2000
MAX_REJECTION_MESSAGE_LENGTH = 2000
PHONE_PATTERN = r"^[+]?[\d\s\-().]{7,15}$"

# Sorting
DEFAULT_SORT = "start_time:asc"

# API metadata
API_TITLE = "SlotKeeper API"
API_DESCRIPTION = "Booking requests, administrator review and overlap-free scheduling."
API_VERSION = "1.0.0"
