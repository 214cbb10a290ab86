"""Question catalog: models, sources and non-repeating selection."""

from .catalog import CatalogConfig, QuestionCatalog
from .models import DEFAULT_CATEGORIES, PresentedQuestion, Question, category_prefix
from .seed import get_fallback_question, seed_questions
from .sources import (
    BuiltinSource,
    CSVSource,
    JSONBundleSource,
    QuestionSource,
    default_sources,
)

__all__ = [
    "BuiltinSource",
    "CSVSource",
    "CatalogConfig",
    "DEFAULT_CATEGORIES",
    "JSONBundleSource",
    "PresentedQuestion",
    "Question",
    "QuestionCatalog",
    "QuestionSource",
    "category_prefix",
    "default_sources",
    "get_fallback_question",
    "seed_questions",
]
