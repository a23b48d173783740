"""
Domain models for lessons, flashcards and spaced-repetition state.

These are pure data structures with no I/O or external dependencies.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .constants import DEFAULT_EASE

_LESSON_NUMBER_RE = re.compile(r"lesson\D*(\d+)")
_ANY_NUMBER_RE = re.compile(r"\d+")


class Grade(str, Enum):
    """The three answer buttons offered during review."""

    AGAIN = "again"
    GOOD = "good"
    EASY = "easy"

    @property
    def quality(self) -> int:
        """SM-2 quality score (0-5) for this grade."""
        return _QUALITY[self]


_QUALITY = {Grade.AGAIN: 0, Grade.GOOD: 4, Grade.EASY: 5}


class FlashcardKind(str, Enum):
    VOCAB = "vocab"
    EXAMPLE = "example"


class SessionState(str, Enum):
    IDLE = "idle"
    REVIEWING = "reviewing"
    EMPTY = "empty"


@dataclass(frozen=True)
class CardState:
    """
    Memory state for one flashcard.

    Attributes:
        due_at: Next time the card should be presented (aware UTC).
        interval_seconds: Interval that produced due_at; drives the next one.
        ease_factor: Growth multiplier for successful reviews (>= 1.3).
        repetitions: Consecutive successful reviews, reset on failure.
        lapses: Total failed reviews.
        last_reviewed_at: Time of the most recent grade, if any.
    """

    due_at: datetime
    interval_seconds: float
    ease_factor: float
    repetitions: int
    lapses: int
    last_reviewed_at: datetime | None = None

    @classmethod
    def new(cls, now: datetime) -> "CardState":
        """Baseline state for a card that has never been graded."""
        return cls(
            due_at=now,
            interval_seconds=0.0,
            ease_factor=DEFAULT_EASE,
            repetitions=0,
            lapses=0,
            last_reviewed_at=None,
        )


@dataclass(frozen=True)
class Flashcard:
    id: str
    kind: FlashcardKind
    front_text: str
    back_text: str
    audio_key: str | None = None
    shows_optional_notice: bool = False


@dataclass(frozen=True)
class BilingualItem:
    """A Tagalog/English pair as it appears in lesson content."""

    tagalog: str
    english: str
    required: bool = True
    audio_path: str | None = None

    @property
    def audio_key(self) -> str | None:
        if self.audio_path is None:
            return None
        trimmed = self.audio_path.strip()
        return trimmed or None


def extract_lesson_number(text: str) -> int | None:
    """
    Pull a lesson number out of an id, title or file name.

    Prefers the number following "lesson" ("lesson2", "Lesson 2", "lesson-2"),
    falling back to the first number anywhere in the string.
    """
    lower = text.lower()
    match = _LESSON_NUMBER_RE.search(lower)
    if match:
        return int(match.group(1))

    match = _ANY_NUMBER_RE.search(lower)
    if match:
        return int(match.group(0))
    return None


@dataclass(frozen=True)
class Lesson:
    id: str
    title: str
    vocabulary: list[BilingualItem] = field(default_factory=list)
    example_sentences: list[BilingualItem] = field(default_factory=list)
    schema_version: int = 1

    @property
    def numeric_order(self) -> int | None:
        n = extract_lesson_number(self.id)
        if n is not None:
            return n
        return extract_lesson_number(self.title)

    @property
    def flashcards(self) -> list[Flashcard]:
        """Study deck for this lesson: vocab (in order) then examples (in order)."""
        cards: list[Flashcard] = []

        for i, item in enumerate(self.vocabulary):
            cards.append(
                Flashcard(
                    id=f"{self.id}-{FlashcardKind.VOCAB.value}-{i}",
                    kind=FlashcardKind.VOCAB,
                    front_text=item.english,
                    back_text=item.tagalog,
                    audio_key=item.audio_key,
                    shows_optional_notice=not item.required,
                )
            )

        for i, item in enumerate(self.example_sentences):
            cards.append(
                Flashcard(
                    id=f"{self.id}-{FlashcardKind.EXAMPLE.value}-{i}",
                    kind=FlashcardKind.EXAMPLE,
                    front_text=item.english,
                    back_text=item.tagalog,
                    audio_key=item.audio_key,
                    shows_optional_notice=False,
                )
            )

        return cards


@dataclass
class Queue:
    """Cards selected for a session, split into reviews and first-time cards."""

    due: list[Flashcard] = field(default_factory=list)
    new: list[Flashcard] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.due and not self.new


@dataclass(frozen=True)
class HistoryEntry:
    """Snapshot taken before a grade so it can be undone."""

    cards: tuple[Flashcard, ...]
    index: int
    revealed: bool
    card_id: str
    previous_state: CardState | None


def lesson_sort_key(lesson: Lesson) -> tuple[int, int, str]:
    """
    Sort key placing numbered lessons first (ascending), then unnumbered ones,
    with ties broken by case-insensitive title.
    """
    order = lesson.numeric_order
    if order is None:
        return (1, 0, lesson.title.casefold())
    return (0, order, lesson.title.casefold())
