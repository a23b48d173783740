"""
Review session controller.

SessionEngine owns the mutable state of a single review session:

    IDLE --start()--> REVIEWING --grade() on last card--> EMPTY
                      (start() on an empty queue goes straight to EMPTY)

Every grade is recorded so that undo() can restore both the session and the
card's stored memory state exactly as they were.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from tala.application.config import StudySettings
from tala.application.queue_builder import build_queue
from tala.application.scheduler import apply_grade
from tala.domain.constants import AGAIN_REINSERT_OFFSET
from tala.domain.models import CardState, Flashcard, Grade, HistoryEntry, SessionState
from tala.domain.ports import CardStateRepository

logger = logging.getLogger(__name__)

SessionListener = Callable[["SessionEngine"], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionEngine:
    """
    Command/query interface for one review session.

    Commands: start, reveal, grade, undo.
    Queries: current_card, can_undo, state, index, revealed and the counts.

    Not thread-safe; one caller drives a session at a time.
    """

    def __init__(
        self,
        repository: CardStateRepository,
        deck_provider: Callable[[], Sequence[Flashcard]],
        settings: StudySettings | None = None,
        clock: Callable[[], datetime] = utc_now,
        again_offset: int = AGAIN_REINSERT_OFFSET,
    ):
        """
        Args:
            repository: Where card states are read and written.
            deck_provider: Returns the eligible deck when a session starts.
            settings: Daily limits and review-ahead switch.
            clock: Source of "now"; sampled once per start() and grade().
            again_offset: How many cards later an "again" card reappears.
        """
        self._repo = repository
        self._deck_provider = deck_provider
        self.settings = settings or StudySettings()
        self._clock = clock
        self.again_offset = max(0, again_offset)

        self._cards: list[Flashcard] = []
        self._index = 0
        self._revealed = False
        self._history: list[HistoryEntry] = []
        self._state = SessionState.IDLE
        self._due_count = 0
        self._new_count = 0
        self._listeners: list[SessionListener] = []

    # ---------- Queries ----------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def index(self) -> int:
        return self._index

    @property
    def revealed(self) -> bool:
        return self._revealed

    @property
    def cards(self) -> tuple[Flashcard, ...]:
        """Remaining working list, current card at `index`."""
        return tuple(self._cards)

    @property
    def remaining(self) -> int:
        return len(self._cards)

    @property
    def session_count(self) -> int:
        """Cards in the queue built by the last start()."""
        return self._due_count + self._new_count

    @property
    def due_count(self) -> int:
        return self._due_count

    @property
    def new_count(self) -> int:
        return self._new_count

    def current_card(self) -> Flashcard | None:
        if self._state is not SessionState.REVIEWING:
            return None
        if 0 <= self._index < len(self._cards):
            return self._cards[self._index]
        return None

    def can_undo(self) -> bool:
        return bool(self._history)

    # ---------- Commands ----------

    def start(self) -> SessionState:
        """Build a fresh queue and begin a new session."""
        now = self._clock()
        queue = build_queue(
            self._deck_provider(),
            self._repo.snapshot(),
            now,
            self.settings.daily_new_limit,
            self.settings.daily_review_limit,
            self.settings.allow_review_ahead,
        )

        self._cards = queue.due + queue.new
        self._index = 0
        self._revealed = False
        self._history.clear()
        self._due_count = len(queue.due)
        self._new_count = len(queue.new)
        self._state = SessionState.REVIEWING if self._cards else SessionState.EMPTY

        logger.info(f"Session started: {self._due_count} due, {self._new_count} new")
        self._notify()
        return self._state

    def reveal(self) -> None:
        if self.current_card() is None:
            return
        self._revealed = True
        self._notify()

    def grade(self, grade: Grade) -> CardState | None:
        """
        Grade the current card and advance.

        Returns:
            The card's new state, or None if there was no current card.
        """
        card = self.current_card()
        if card is None:
            logger.debug("grade() ignored: no current card")
            return None

        grade = Grade(grade)
        previous = self._repo.get(card.id)
        now = self._clock()
        next_state = apply_grade(grade, previous, now)
        self._repo.upsert(card.id, next_state)

        # Recorded only once the new state is stored.
        self._history.append(
            HistoryEntry(
                cards=tuple(self._cards),
                index=self._index,
                revealed=self._revealed,
                card_id=card.id,
                previous_state=previous,
            )
        )

        del self._cards[self._index]
        if grade is Grade.AGAIN:
            insert_at = min(self._index + self.again_offset, len(self._cards))
            self._cards.insert(insert_at, card)

        self._revealed = False
        if not self._cards or self._index >= len(self._cards):
            self._cards = []
            self._index = 0
            self._state = SessionState.EMPTY

        logger.debug(f"Graded {card.id} {grade.value}; due {next_state.due_at.isoformat()}")
        self._notify()
        return next_state

    def undo(self) -> bool:
        """
        Reverse the most recent grade.

        Returns:
            True if a grade was undone, False if there was nothing to undo.
        """
        if not self._history:
            logger.debug("undo() ignored: empty history")
            return False

        entry = self._history.pop()
        if entry.previous_state is None:
            self._repo.remove(entry.card_id)
        else:
            self._repo.upsert(entry.card_id, entry.previous_state)

        self._cards = list(entry.cards)
        self._index = entry.index
        self._revealed = entry.revealed
        self._state = SessionState.REVIEWING if self._cards else SessionState.EMPTY

        logger.debug(f"Undid grade of {entry.card_id}")
        self._notify()
        return True

    # ---------- Listeners ----------

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call `listener(engine)` after every state-changing command."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
