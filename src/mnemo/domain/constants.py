"""Centralized constants for mnemo.

All magic numbers and scheduling defaults live here so every layer
imports from a single source of truth.
"""

# ---------- SM-2 ----------
INITIAL_EASINESS = 2.5
MIN_EASINESS = 1.3
MAX_EASINESS = 3.0
FIRST_INTERVAL = 1  # days, first successful repetition
SECOND_INTERVAL = 6  # days, second successful repetition
FAILED_INTERVAL = 1
FAILED_REVIEW_DELAY_MINUTES = 10
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3

# ---------- Difficulty tiers (upper bound of interval, inclusive) ----------
NEW_MAX_INTERVAL = 1
LEARNING_MAX_INTERVAL = 7
YOUNG_MAX_INTERVAL = 30

# ---------- Sessions ----------
SESSION_HISTORY_LIMIT = 100
SESSION_SIZE_QUICK = 10
SESSION_SIZE_STANDARD = 25
SESSION_SIZE_INTENSIVE = 50
SESSION_SIZE_MAX = 100
RECENT_SESSIONS_SHOWN = 10
WEEKS_OF_PROGRESS = 4

# ---------- Card validation ----------
MAX_ID_LENGTH = 100
MAX_FRONT_LENGTH = 1000
MAX_BACK_LENGTH = 2000
MAX_TAGS = 20
MAX_TAG_LENGTH = 50
