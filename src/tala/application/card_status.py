"""
Human-readable card status for lists and the study screen.

This is a pure computation module with no I/O.
"""

import math
from datetime import datetime

from tala.domain.constants import ONE_DAY_SECONDS
from tala.domain.models import CardState

ONE_HOUR_SECONDS = 60 * 60


def due_in_text(seconds: float) -> str:
    """Compact "due in" label: <1h, Nh (under a day) or Nd, rounding up."""
    clamped = max(0.0, seconds)
    if clamped < ONE_HOUR_SECONDS:
        return "<1h"
    if clamped < ONE_DAY_SECONDS:
        return f"{math.ceil(clamped / ONE_HOUR_SECONDS)}h"
    return f"{math.ceil(clamped / ONE_DAY_SECONDS)}d"


def status_text(state: CardState | None, now: datetime) -> str:
    if state is None:
        return "New"
    if state.due_at <= now:
        return "Due"
    return f"Due {due_in_text((state.due_at - now).total_seconds())}"


def interval_text(state: CardState) -> str:
    days = max(1, round(max(0.0, state.interval_seconds) / ONE_DAY_SECONDS))
    return f"{days}d"


def ease_text(state: CardState) -> str:
    return f"{state.ease_factor:.2f}"
