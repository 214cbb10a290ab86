"""Question catalog with non-repeating random selection."""

import asyncio
import logging
import random
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ..errors import DataSourceUnavailable, StorageError
from ..storage import BackgroundWriter, KeyValueStore
from .models import DEFAULT_CATEGORIES, PresentedQuestion, Question, category_prefix
from .seed import get_fallback_question, seed_questions
from .sources import BuiltinSource, QuestionSource

logger = logging.getLogger(__name__)


@dataclass
class CatalogConfig:
    """Configuration for the question catalog."""

    default_category: str = "funfacts"
    reset_threshold: float = 0.2  # fraction of a category left unused before it recycles
    storage_key: str = "quiz_used_question_ids"

    def __post_init__(self) -> None:
        if not 0.0 <= self.reset_threshold <= 1.0:
            raise ValueError("reset_threshold must be between 0 and 1")
        if not self.default_category:
            raise ValueError("default_category must not be empty")


class QuestionCatalog:
    """Owns the question pool and the set of recently served ids.

    Lifecycle: construct, ``await load()``, draw questions, ``await flush()``.
    Drawing before loading triggers the load and waits for it.
    """

    def __init__(
        self,
        store: KeyValueStore,
        sources: list[QuestionSource] | None = None,
        config: CatalogConfig | None = None,
        writer: BackgroundWriter | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.sources = sources if sources is not None else [BuiltinSource()]
        self.config = config or CatalogConfig()
        self.writer = writer or BackgroundWriter(store)
        self._rng = rng or random.Random()
        self._questions: list[Question] = []
        self._by_category: dict[str, list[Question]] = {}
        self._category_of: dict[str, str] = {}
        self._category_counts: dict[str, int] = {}
        self._used_ids: set[str] = set()
        self._source_name: str | None = None
        self._load_task: asyncio.Task | None = None

    @property
    def questions(self) -> tuple[Question, ...]:
        return tuple(self._questions)

    @property
    def used_ids(self) -> frozenset[str]:
        return frozenset(self._used_ids)

    @property
    def category_counts(self) -> dict[str, int]:
        return dict(self._category_counts)

    @property
    def source_name(self) -> str | None:
        """Name of the source the pool came from, once loaded."""
        return self._source_name

    @property
    def is_loaded(self) -> bool:
        return self._load_task is not None and self._load_task.done()

    async def load(self) -> int:
        """Load the pool and the persisted used ids, at most once.

        Concurrent and repeated calls share the same load.

        Returns:
            Number of questions in the pool.
        """
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load())
        return await asyncio.shield(self._load_task)

    async def _load(self) -> int:
        self._restore_used_ids()

        for source in self.sources:
            try:
                questions = await source.load()
            except DataSourceUnavailable as e:
                logger.info("Question source %s unavailable: %s", source.name, e)
                continue
            except Exception as e:
                logger.warning("Failed to load questions from %s: %s", source.name, e)
                continue

            if questions:
                self._set_questions(questions, source.name)
                break
            logger.info("Question source %s yielded no usable questions", source.name)
        else:
            logger.warning("All question sources failed, using built-in questions")
            self._set_questions(seed_questions(), "builtin")

        logger.info(
            "Loaded %d questions from %s; categories: %s",
            len(self._questions),
            self._source_name,
            ", ".join(self._category_counts),
        )
        return len(self._questions)

    def _set_questions(self, questions: list[Question], source_name: str) -> None:
        unique: list[Question] = []
        seen: set[str] = set()
        for question in questions:
            if question.id in seen:
                logger.warning("Duplicate question id %s in %s, keeping first", question.id, source_name)
                continue
            seen.add(question.id)
            unique.append(question)

        self._questions = unique
        self._source_name = source_name
        self._update_category_counts()

    def _update_category_counts(self) -> None:
        """Recompute per-category indexes from the pool."""
        self._by_category = {}
        self._category_of = {}
        for question in self._questions:
            self._by_category.setdefault(question.category, []).append(question)
            self._category_of[question.id] = question.category
        self._category_counts = dict(Counter(q.category for q in self._questions))

    def _restore_used_ids(self) -> None:
        try:
            data = self.store.get_json(self.config.storage_key)
        except StorageError as e:
            logger.warning("Cannot restore used questions: %s", e)
            return

        if not isinstance(data, dict):
            return
        ids = data.get("usedQuestionIds")
        if isinstance(ids, list):
            self._used_ids = {str(i) for i in ids}

    def _snapshot(self) -> dict[str, Any]:
        return {
            "usedQuestionIds": sorted(self._used_ids),
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        }

    def _persist(self) -> None:
        self.writer.schedule(self.config.storage_key, self._snapshot)

    async def get_random_question(self, category: str | None = None) -> PresentedQuestion:
        """Draw an unused question from a category.

        Never raises: an empty or unknown category, or any internal error,
        yields the category's fallback question instead.
        """
        category = category or self.config.default_category
        try:
            await self.load()
            return self._select(category)
        except Exception:
            logger.exception("Error getting random question for %s", category)
            return get_fallback_question(category)

    def _select(self, category: str) -> PresentedQuestion:
        pool = self._by_category.get(category)
        if not pool:
            logger.warning("No questions found for category: %s", category)
            return get_fallback_question(category)

        available = [q for q in pool if q.id not in self._used_ids]
        if len(available) < self.config.reset_threshold * self._category_counts[category]:
            self._evict_category(category)
            available = [q for q in pool if q.id not in self._used_ids]

        if not available:
            return get_fallback_question(category)

        question = self._rng.choice(available)
        self._used_ids.add(question.id)
        self._persist()

        logger.debug("Selected question %s from %d available", question.id, len(available))
        return question.present()

    def _evict_category(self, category: str) -> None:
        """Forget the used ids of one category."""
        prefix = category_prefix(category)
        evicted = {
            qid
            for qid in self._used_ids
            if self._category_of.get(qid) == category
            or (qid not in self._category_of and qid.startswith(prefix))
        }
        self._used_ids -= evicted
        self._persist()
        logger.info("Reset tracking for category %s (%d ids)", category, len(evicted))

    async def get_categories(self) -> list[str]:
        """Distinct categories in the pool, or the default list if it is empty."""
        await self.load()
        categories = list(self._category_counts)
        return categories if categories else list(DEFAULT_CATEGORIES)

    async def reset_used_questions(self) -> None:
        """Forget every served question."""
        await self.load()
        self._used_ids.clear()
        self._persist()
        logger.info("Reset all used questions tracking")

    async def flush(self) -> None:
        """Wait for pending persistence writes."""
        await self.writer.flush()
