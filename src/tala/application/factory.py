"""
Session Factory
Centralizes wiring of repositories, lessons and the session engine from config.
"""

import logging

from tala.application.config import AppConfig
from tala.application.deck_builder import build_eligible_deck
from tala.application.session import SessionEngine
from tala.domain.models import Flashcard
from tala.domain.ports import CardStateRepository
from tala.infrastructure.completion_store import JsonCompletionStore
from tala.infrastructure.lesson_loader import load_lessons
from tala.infrastructure.state_store import (
    InMemoryCardStateRepository,
    JsonCardStateRepository,
)

logger = logging.getLogger(__name__)


def get_state_repository(config: AppConfig, dry_run: bool = False) -> CardStateRepository:
    """
    Returns the repository for card states.

    A dry run starts from the persisted states but never writes them back.
    """
    persisted = JsonCardStateRepository(config.state_file)
    if dry_run:
        logger.info("Dry run: card states will not be saved")
        return InMemoryCardStateRepository(persisted.snapshot())
    return persisted


def get_completion_store(config: AppConfig) -> JsonCompletionStore:
    return JsonCompletionStore(config.completion_file)


def load_eligible_deck(config: AppConfig) -> list[Flashcard]:
    """Lessons from config.lessons_dir filtered to the completed ones."""
    lessons = load_lessons(config.lessons_dir)
    completed = get_completion_store(config).completed_ids
    deck = build_eligible_deck(lessons, completed)
    logger.debug(f"Eligible deck: {len(deck)} cards from {len(completed)} completed lessons")
    return deck


def get_session_engine(
    config: AppConfig,
    repository: CardStateRepository | None = None,
    deck: list[Flashcard] | None = None,
) -> SessionEngine:
    """
    Build a session engine. When `deck` is given it is reused for every
    start(); otherwise lessons are reloaded from disk each time.
    """
    if deck is not None:
        fixed = list(deck)
        deck_provider = lambda: fixed  # noqa: E731
    else:
        deck_provider = lambda: load_eligible_deck(config)  # noqa: E731

    return SessionEngine(
        repository=repository or get_state_repository(config),
        deck_provider=deck_provider,
        settings=config.study_settings(),
    )
