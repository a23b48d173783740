"""
Card state repositories.

Implements CardStateRepository on top of a versioned JSON file, plus an
in-memory variant for tests and dry runs.
"""

import json
import logging
import os
import tempfile
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tala.domain.constants import STATE_SCHEMA
from tala.domain.errors import DecodeError, PersistError
from tala.domain.models import CardState
from tala.domain.ports import CardStateRepository, StatesListener

logger = logging.getLogger(__name__)


class CardStateRecord(BaseModel):
    """On-disk shape of a single CardState."""

    due_at: datetime
    interval_seconds: float
    ease_factor: float
    repetitions: int
    lapses: int
    last_reviewed_at: datetime | None = None

    @field_validator("due_at", "last_reviewed_at", mode="after")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @classmethod
    def from_state(cls, state: CardState) -> "CardStateRecord":
        return cls(
            due_at=state.due_at,
            interval_seconds=state.interval_seconds,
            ease_factor=state.ease_factor,
            repetitions=state.repetitions,
            lapses=state.lapses,
            last_reviewed_at=state.last_reviewed_at,
        )

    def to_state(self) -> CardState:
        return CardState(
            due_at=self.due_at,
            interval_seconds=self.interval_seconds,
            ease_factor=self.ease_factor,
            repetitions=self.repetitions,
            lapses=self.lapses,
            last_reviewed_at=self.last_reviewed_at,
        )


class CardStateFile(BaseModel):
    """Whole persisted store: a schema tag plus states keyed by card id."""

    model_config = ConfigDict(populate_by_name=True)

    schema_tag: str = Field(alias="schema")
    states: dict[str, CardStateRecord] = Field(default_factory=dict)


class InMemoryCardStateRepository(CardStateRepository):
    """
    Keeps card states in a dict. Subclasses add persistence by overriding
    `_persist`.
    """

    def __init__(self, states: dict[str, CardState] | None = None):
        self._states: dict[str, CardState] = dict(states or {})
        self._listeners: list[StatesListener] = []

    def close(self) -> None:
        """Drop all listeners. The repository stays readable."""
        self._listeners.clear()

    def get(self, card_id: str) -> CardState | None:
        return self._states.get(card_id)

    def upsert(self, card_id: str, state: CardState) -> None:
        self._states[card_id] = state
        self._changed()

    def remove(self, card_id: str) -> None:
        if self._states.pop(card_id, None) is not None:
            self._changed()

    def remove_all(self) -> None:
        self._states.clear()
        self._changed()

    def snapshot(self) -> dict[str, CardState]:
        return dict(self._states)

    def subscribe(self, listener: StatesListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        try:
            self._persist()
        except PersistError as e:
            # Non-fatal: the last persisted value stays authoritative.
            logger.warning(f"Could not persist card states: {e}")

        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning(f"Card state listener failed: {e}")

    def _persist(self) -> None:
        pass


class JsonCardStateRepository(InMemoryCardStateRepository):
    """
    Persists card states as JSON, tagged with a schema version.

    A corrupt or mismatched file loads as an empty store. A failed write
    leaves the previous file untouched.
    """

    def __init__(self, path: Path, schema: str = STATE_SCHEMA):
        self.path = Path(path)
        self.schema = schema
        super().__init__()
        try:
            self._states = self._load()
        except DecodeError as e:
            logger.warning(f"Discarding unreadable card states in {self.path}: {e}")
            self._states = {}

    def _load(self) -> dict[str, CardState]:
        if not self.path.exists():
            return {}

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodeError(str(e)) from e

        try:
            doc = CardStateFile.model_validate(raw)
        except ValidationError as e:
            raise DecodeError(str(e)) from e

        if doc.schema_tag != self.schema:
            raise DecodeError(f"schema {doc.schema_tag!r} != {self.schema!r}")

        return {card_id: rec.to_state() for card_id, rec in doc.states.items()}

    def _persist(self) -> None:
        doc = CardStateFile(
            schema_tag=self.schema,
            states={k: CardStateRecord.from_state(v) for k, v in self._states.items()},
        )
        payload = json.dumps(doc.model_dump(mode="json", by_alias=True), indent=2, sort_keys=True)

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            raise PersistError(str(e)) from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

        logger.debug(f"Persisted {len(self._states)} card states to {self.path}")
