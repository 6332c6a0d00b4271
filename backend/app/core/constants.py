# backend/app/core/constants.py
"""
Application-wide constants for the Disciplix platform.
"""

BRAND_NAME = "Disciplix"
API_VERSION = "1.0.0"
API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Fitness trainer marketplace: trainer directory, session booking and accounts."

# Session duration bounds (minutes)
MIN_SESSION_DURATION = 30
MAX_SESSION_DURATION = 180

# A new booking conflicts with any active session starting up to this many
# minutes before it.
CONFLICT_LOOKBACK_MINUTES = 120

# Sessions can be cancelled only this far ahead of their start.
CANCELLATION_WINDOW_HOURS = 24

# Trainer directory paging
DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100
RECENT_REVIEWS_IN_LISTING = 3
UPCOMING_SESSIONS_IN_DETAIL = 10

# Password policy
MIN_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2

# Refresh cookie lifetimes
REFRESH_COOKIE_MAX_AGE_REMEMBER = 30 * 24 * 60 * 60
REFRESH_COOKIE_MAX_AGE_DEFAULT = 24 * 60 * 60

DEFAULT_CURRENCY = "USD"

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)
