"""
SM-2 scheduler adapted to three grading buttons.

This is a pure computation module with no I/O. The update rule:

1. Map the grade to an SM-2 quality score (again=0, good=4, easy=5).
2. Update the ease factor for every grade, floored at 1.3.
3. On "again", reset the streak and schedule a short relearn step.
4. On success, grow the interval: 1 day, then 6 days, then interval * ease,
   with an extra bonus for "easy", a one-day minimum and a 100-year cap.
"""

from dataclasses import replace
from datetime import datetime, timedelta

from tala.domain.constants import (
    EASY_BONUS,
    MAX_INTERVAL_SECONDS,
    MIN_EASE,
    ONE_DAY_SECONDS,
    RELEARN_SECONDS,
    SECOND_INTERVAL_DAYS,
)
from tala.domain.models import CardState, Grade


def next_ease(ease_factor: float, grade: Grade) -> float:
    """SM-2 ease update for the given grade."""
    miss = 5 - grade.quality
    return max(MIN_EASE, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def apply_grade(grade: Grade, previous: CardState | None, now: datetime) -> CardState:
    """
    Compute the next memory state for a card.

    Args:
        grade: Button pressed by the learner.
        previous: Stored state, or None for a card that was never graded.
        now: Time of the grading event.

    Returns:
        The new CardState. Never raises; out-of-range values in `previous`
        are absorbed by the ease and interval bounds.
    """
    state = previous if previous is not None else CardState.new(now)
    ease = next_ease(state.ease_factor, grade)

    if grade is Grade.AGAIN:
        return replace(
            state,
            ease_factor=ease,
            repetitions=0,
            lapses=state.lapses + 1,
            interval_seconds=float(RELEARN_SECONDS),
            due_at=now + timedelta(seconds=RELEARN_SECONDS),
            last_reviewed_at=now,
        )

    repetitions = state.repetitions + 1

    if repetitions == 1:
        interval = float(ONE_DAY_SECONDS)
    elif repetitions == 2:
        interval = float(SECOND_INTERVAL_DAYS * ONE_DAY_SECONDS)
    else:
        # A card missing its interval (or holding NaN) falls back to the 6-day step.
        base = max(SECOND_INTERVAL_DAYS * ONE_DAY_SECONDS, state.interval_seconds)
        interval = base * ease

    if grade is Grade.EASY:
        interval *= EASY_BONUS

    # max() with the floor first also maps NaN to the floor.
    interval = min(max(float(ONE_DAY_SECONDS), interval), float(MAX_INTERVAL_SECONDS))

    return replace(
        state,
        ease_factor=ease,
        repetitions=repetitions,
        interval_seconds=interval,
        due_at=now + timedelta(seconds=interval),
        last_reviewed_at=now,
    )
