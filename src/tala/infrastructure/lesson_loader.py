"""Loads normalized lesson files (JSON or YAML) from a directory."""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tala.domain.constants import LESSON_FILE_PREFIX, LESSON_FILE_SUFFIXES
from tala.domain.errors import LessonLoadError
from tala.domain.models import BilingualItem, Lesson, extract_lesson_number, lesson_sort_key

logger = logging.getLogger(__name__)


class BilingualItemDoc(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    tagalog: str
    english: str
    required: bool = True
    audio_path: str | None = Field(default=None, alias="audioPath")

    def to_domain(self) -> BilingualItem:
        return BilingualItem(
            tagalog=self.tagalog,
            english=self.english,
            required=self.required,
            audio_path=self.audio_path,
        )


class LessonDoc(BaseModel):
    """
    Normalized lesson file.

    `contents` holds the rendered lesson body; it is accepted but not used
    for flashcards.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    schema_version: int = Field(default=1, alias="schemaVersion")
    id: str
    title: str
    vocabulary: list[BilingualItemDoc] = Field(default_factory=list)
    contents: list[dict[str, Any]] = Field(default_factory=list)
    example_sentences: list[BilingualItemDoc] = Field(
        default_factory=list, alias="exampleSentences"
    )

    def to_domain(self) -> Lesson:
        return Lesson(
            id=self.id,
            title=self.title,
            vocabulary=[v.to_domain() for v in self.vocabulary],
            example_sentences=[e.to_domain() for e in self.example_sentences],
            schema_version=self.schema_version,
        )


def is_lesson_file(path: Path) -> bool:
    name = path.name.lower()
    return (
        path.is_file()
        and name.startswith(LESSON_FILE_PREFIX)
        and path.suffix.lower() in LESSON_FILE_SUFFIXES
    )


def parse_lesson_file(path: Path) -> Lesson:
    """
    Parse a single lesson file.

    Raises:
        LessonLoadError: if the file cannot be read or does not match the schema.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LessonLoadError(f"Cannot read {path.name}: {e}", path) from e

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise LessonLoadError(f"Invalid syntax in {path.name}: {e}", path) from e

    try:
        return LessonDoc.model_validate(data).to_domain()
    except ValidationError as e:
        raise LessonLoadError(f"Invalid lesson {path.name}: {e}", path) from e


def load_lessons(directory: Path) -> list[Lesson]:
    """
    Load every lesson file in `directory`.

    Lessons are ordered by numeric order (falling back to the number in the
    file name), then by case-insensitive title.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise LessonLoadError(f"Lesson directory not found: {directory}", directory)

    loaded: list[tuple[Lesson, Path]] = []
    for path in sorted(directory.iterdir()):
        if not is_lesson_file(path):
            continue
        loaded.append((parse_lesson_file(path), path))

    logger.debug(f"Loaded {len(loaded)} lessons from {directory}")

    def sort_key(pair: tuple[Lesson, Path]) -> tuple[int, int, str]:
        lesson, path = pair
        if lesson.numeric_order is None:
            n = extract_lesson_number(path.name)
            if n is not None:
                return (0, n, lesson.title.casefold())
        return lesson_sort_key(lesson)

    return [lesson for lesson, _ in sorted(loaded, key=sort_key)]
