"""Question sources tried in order when loading the catalog.

Each source either returns the questions it could parse or raises
DataSourceUnavailable. An empty list means the source was readable but
held no usable questions; the catalog moves on in both cases.
"""

from __future__ import annotations

import asyncio
import csv
import io
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from ..errors import DataSourceUnavailable
from .models import Question
from .seed import seed_questions

if TYPE_CHECKING:
    from ..config import AppConfig

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = (
    "id",
    "category",
    "question",
    "optionA",
    "optionB",
    "optionC",
    "optionD",
    "correctAnswer",
    "explanation",
)


def parse_rows(rows: Iterable[Mapping[str, Any]], origin: str) -> list[Question]:
    """Turn raw rows into questions, discarding the unusable ones."""
    questions: list[Question] = []
    skipped = 0
    for row in rows:
        if not isinstance(row, Mapping):
            skipped += 1
            continue
        prompt = row.get("question") or row.get("prompt") or ""
        if not str(row.get("id") or "").strip() or not str(prompt).strip():
            skipped += 1
            continue
        try:
            questions.append(Question.from_row(row))
        except ValueError as e:
            logger.debug("Skipping row from %s: %s", origin, e)
            skipped += 1
    if skipped:
        logger.info("Discarded %d unusable row(s) from %s", skipped, origin)
    return questions


class QuestionSource(ABC):
    """Base interface for question sources."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short description used in logs."""
        ...

    @abstractmethod
    async def load(self) -> list[Question]:
        """Load questions.

        Raises:
            DataSourceUnavailable: If the source cannot be read at all.
        """
        ...


class FileSource(QuestionSource):
    """A source backed by a single file, read off the event loop."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_text(self) -> str:
        if not self.path.is_file():
            raise DataSourceUnavailable(f"File not found: {self.path}")
        try:
            return self.path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise DataSourceUnavailable(f"Cannot read {self.path}: {e}") from e

    async def load(self) -> list[Question]:
        loop = asyncio.get_running_loop()
        text = await loop.run_in_executor(None, self._read_text)
        return self.parse(text)

    @abstractmethod
    def parse(self, text: str) -> list[Question]:
        """Parse the file contents."""
        ...


class JSONBundleSource(FileSource):
    """Pre-built question bundle: a JSON list of rows or {"questions": [...]}."""

    @property
    def name(self) -> str:
        return f"bundle:{self.path}"

    def parse(self, text: str) -> list[Question]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DataSourceUnavailable(f"Invalid JSON in {self.path}: {e}") from e

        if isinstance(data, Mapping):
            data = data.get("questions")
        if not isinstance(data, list):
            raise DataSourceUnavailable(f"{self.path} does not contain a question list")

        return parse_rows(data, self.name)


class CSVSource(FileSource):
    """Delimited text with a header row naming the required columns."""

    @property
    def name(self) -> str:
        return f"csv:{self.path}"

    def parse(self, text: str) -> list[Question]:
        reader = csv.DictReader(io.StringIO(text))
        header = [h.strip() for h in reader.fieldnames or []]
        missing = [col for col in REQUIRED_COLUMNS if col not in header]
        if missing:
            raise DataSourceUnavailable(
                f"{self.path} is missing column(s): {', '.join(missing)}"
            )
        reader.fieldnames = header

        try:
            rows = [row for row in reader if any((v or "").strip() for v in row.values() if isinstance(v, str))]
        except csv.Error as e:
            raise DataSourceUnavailable(f"Malformed CSV in {self.path}: {e}") from e

        return parse_rows(rows, self.name)


class BuiltinSource(QuestionSource):
    """The small seed set compiled into the package."""

    @property
    def name(self) -> str:
        return "builtin"

    async def load(self) -> list[Question]:
        return seed_questions()


def default_sources(config: AppConfig) -> list[QuestionSource]:
    """The standard chain: bundle, secondary CSV, tertiary CSV, builtin."""
    sources: list[QuestionSource] = [JSONBundleSource(config.bundle_path)]
    sources.extend(CSVSource(path) for path in config.csv_paths)
    sources.append(BuiltinSource())
    return sources
