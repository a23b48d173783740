"""Tracks which lessons the learner has marked as completed."""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class JsonCompletionStore:
    """
    Completed lesson ids persisted as a sorted JSON list.

    An unreadable file loads as empty; failed writes are logged and ignored.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._ids: set[str] = self._load()

    @property
    def completed_ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    def is_completed(self, lesson_id: str) -> bool:
        return lesson_id in self._ids

    def set_completed(self, lesson_id: str, completed: bool) -> None:
        if completed:
            self._ids.add(lesson_id)
        else:
            self._ids.discard(lesson_id)
        self._persist()

    def toggle(self, lesson_id: str) -> bool:
        """Flip a lesson's completion and return the new value."""
        completed = not self.is_completed(lesson_id)
        self.set_completed(lesson_id, completed)
        return completed

    def _load(self) -> set[str]:
        if not self.path.exists():
            return set()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable completion file {self.path}: {e}")
            return set()
        if not isinstance(data, list):
            logger.warning(f"Ignoring malformed completion file {self.path}")
            return set()
        return {str(x) for x in data}

    def _persist(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(sorted(self._ids), indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not save completed lessons to {self.path}: {e}")
