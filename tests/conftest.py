import json
import os
from datetime import datetime, timedelta, timezone

import pytest

from tala.domain.models import BilingualItem, CardState, Flashcard, FlashcardKind, Lesson

NOW = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_card(card_id: str, kind: FlashcardKind = FlashcardKind.VOCAB) -> Flashcard:
    return Flashcard(id=card_id, kind=kind, front_text=f"front {card_id}", back_text=f"back {card_id}")


def make_state(due_at: datetime, **kwargs) -> CardState:
    defaults = dict(
        interval_seconds=86400.0,
        ease_factor=2.5,
        repetitions=1,
        lapses=0,
        last_reviewed_at=due_at - timedelta(days=1),
    )
    defaults.update(kwargs)
    return CardState(due_at=due_at, **defaults)


def make_lesson(lesson_id: str, title: str, vocab: int = 2, examples: int = 1) -> Lesson:
    return Lesson(
        id=lesson_id,
        title=title,
        vocabulary=[
            BilingualItem(tagalog=f"{lesson_id} tl {i}", english=f"{lesson_id} en {i}")
            for i in range(vocab)
        ],
        example_sentences=[
            BilingualItem(tagalog=f"{lesson_id} ex tl {i}", english=f"{lesson_id} ex en {i}")
            for i in range(examples)
        ],
    )


def write_lesson_json(directory, name: str, lesson_id: str, title: str, vocab=None, examples=None):
    doc = {
        "schemaVersion": 1,
        "id": lesson_id,
        "title": title,
        "vocabulary": vocab
        if vocab is not None
        else [
            {"tagalog": "Kumusta", "english": "Hello", "required": True, "audioPath": "a/1.mp3"},
            {"tagalog": "Salamat", "english": "Thank you", "required": False},
        ],
        "contents": [{"type": "p", "markdown": "Intro"}],
        "exampleSentences": examples
        if examples is not None
        else [{"tagalog": "Salamat po.", "english": "Thank you (polite).", "required": True}],
    }
    path = directory / name
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config and progress files
    monkeypatch.setenv("HOME", str(home))
    for var in [v for v in os.environ if v.startswith("TALA_")]:
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def lessons_dir(tmp_path):
    d = tmp_path / "lessons"
    d.mkdir()
    return d


@pytest.fixture(name="make_card")
def make_card_fixture():
    return make_card


@pytest.fixture(name="make_state")
def make_state_fixture():
    return make_state


@pytest.fixture(name="make_lesson")
def make_lesson_fixture():
    return make_lesson


@pytest.fixture(name="write_lesson")
def write_lesson_fixture():
    return write_lesson_json
