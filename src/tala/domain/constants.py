"""Centralized constants for tala.

All scheduling numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Scheduler (SM-2 variant) ----------
ONE_DAY_SECONDS = 60 * 60 * 24
RELEARN_SECONDS = 10 * 60
SECOND_INTERVAL_DAYS = 6
DEFAULT_EASE = 2.5
MIN_EASE = 1.3
EASY_BONUS = 1.3
MAX_INTERVAL_DAYS = 36500  # keeps due dates far below datetime.max
MAX_INTERVAL_SECONDS = MAX_INTERVAL_DAYS * ONE_DAY_SECONDS

# ---------- Session ----------
AGAIN_REINSERT_OFFSET = 6  # cards before an "again" card comes back

# ---------- Settings defaults ----------
DEFAULT_DAILY_NEW_LIMIT = 20
DEFAULT_DAILY_REVIEW_LIMIT = 200
DEFAULT_ALLOW_REVIEW_AHEAD = False

# ---------- Persistence ----------
STATE_SCHEMA = "srsCardStates_v1"
LESSON_FILE_PREFIX = "lesson"
LESSON_FILE_SUFFIXES = (".json", ".yaml", ".yml")
