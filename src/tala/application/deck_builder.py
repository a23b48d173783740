"""Builds the eligible study deck from completed lessons."""

from collections.abc import Iterable, Sequence

from tala.domain.models import Flashcard, Lesson, lesson_sort_key


def build_eligible_deck(
    lessons: Sequence[Lesson],
    completed_lesson_ids: Iterable[str],
) -> list[Flashcard]:
    """
    Return a stable, deterministic deck across all completed lessons.

    Order: lesson numeric order (ascending, unnumbered lessons last, ties by
    case-insensitive title), then each lesson's own card order (vocabulary
    first, then example sentences).
    """
    completed = set(completed_lesson_ids)
    selected = sorted(
        (lesson for lesson in lessons if lesson.id in completed),
        key=lesson_sort_key,
    )

    deck: list[Flashcard] = []
    for lesson in selected:
        deck.extend(lesson.flashcards)
    return deck
