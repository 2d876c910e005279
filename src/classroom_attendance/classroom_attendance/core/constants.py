"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

CODE_LENGTH = 8
CODE_SPACE = 10**CODE_LENGTH
MAX_CODE_ATTEMPTS = 10

DEFAULT_POLL_DURATION_MINUTES = 10
MIN_POLL_DURATION_MINUTES = 1
MAX_POLL_DURATION_MINUTES = 1440
