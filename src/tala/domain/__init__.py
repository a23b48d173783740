# Domain Package
from .models import (
    BilingualItem,
    CardState,
    Flashcard,
    FlashcardKind,
    Grade,
    HistoryEntry,
    Lesson,
    Queue,
    SessionState,
)
from .ports import CardStateRepository

__all__ = [
    "BilingualItem",
    "CardState",
    "CardStateRepository",
    "Flashcard",
    "FlashcardKind",
    "Grade",
    "HistoryEntry",
    "Lesson",
    "Queue",
    "SessionState",
]
