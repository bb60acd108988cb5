"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LIST_LIMIT = 200
DEFAULT_APPROVAL_LEVELS = 1
DEFAULT_MAX_CHAIN_DEPTH = 10
DEFAULT_WEEKEND_DAYS = (5, 6)
DEFAULT_WORKDAY_MINUTES = 8 * 60
ALL_WEEKDAYS_MASK = 0b1111111
