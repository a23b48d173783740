"""
Queue builder for daily study sessions.

Builds a session queue by:
1. Splitting the eligible deck into due reviews and never-seen cards
2. Falling back to one not-yet-due card when review-ahead is enabled
3. Truncating both lists to the daily limits (deck order is preserved)
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime

from tala.domain.models import CardState, Flashcard, Queue

logger = logging.getLogger(__name__)


def build_queue(
    eligible_deck: Sequence[Flashcard],
    states: Mapping[str, CardState],
    now: datetime,
    daily_new_limit: int,
    daily_review_limit: int,
    allow_review_ahead: bool,
) -> Queue:
    """
    Build the queue for the current session.

    Args:
        eligible_deck: Cards from completed lessons, in deck order.
        states: Stored card states keyed by card id.
        now: Reference time for deciding what is due.
        daily_new_limit: Maximum new cards (negative values count as 0).
        daily_review_limit: Maximum due cards (negative values count as 0).
        allow_review_ahead: Offer one not-yet-due card when nothing else is left.

    Returns:
        Queue with `due` (state exists and due_at <= now) and `new` (no state).
    """
    new_limit = max(0, daily_new_limit)
    review_limit = max(0, daily_review_limit)

    due: list[Flashcard] = []
    new: list[Flashcard] = []

    for card in eligible_deck:
        state = states.get(card.id)
        if state is None:
            new.append(card)
        elif state.due_at <= now:
            due.append(card)

    if not due and not new and allow_review_ahead:
        ahead = _first_review_ahead_card(eligible_deck, states, now)
        if ahead is not None:
            logger.debug(f"Nothing due; reviewing ahead with {ahead.id}")
            due = [ahead]

    return Queue(due=due[:review_limit], new=new[:new_limit])


def _first_review_ahead_card(
    eligible_deck: Sequence[Flashcard],
    states: Mapping[str, CardState],
    now: datetime,
) -> Flashcard | None:
    """
    First card in deck order whose stored due time is still in the future.

    Note: this is deck order, not the soonest due time. See
    `soonest_review_ahead_card` for the minimum-due alternative.
    """
    for card in eligible_deck:
        state = states.get(card.id)
        if state is not None and state.due_at > now:
            return card
    return None


def soonest_review_ahead_card(
    eligible_deck: Sequence[Flashcard],
    states: Mapping[str, CardState],
    now: datetime,
) -> Flashcard | None:
    """
    Not-yet-due card with the earliest due time (deck order breaks ties).

    Not used by `build_queue`; kept to compare against the deck-order pick.
    """
    best: Flashcard | None = None
    best_due: datetime | None = None
    for card in eligible_deck:
        state = states.get(card.id)
        if state is None or state.due_at <= now:
            continue
        if best_due is None or state.due_at < best_due:
            best, best_due = card, state.due_at
    return best
