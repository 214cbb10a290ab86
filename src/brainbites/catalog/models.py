"""Data models for the question catalog."""

from dataclasses import dataclass, field
from typing import Any, Mapping

OPTION_KEYS = ("A", "B", "C", "D")

DEFAULT_CATEGORIES = (
    "funfacts",
    "psychology",
    "math",
    "science",
    "history",
    "english",
    "general",
)


def category_prefix(category: str) -> str:
    """Id prefix for a category: its first character, upper-cased."""
    return category[:1].upper()


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


@dataclass(frozen=True)
class PresentedQuestion:
    """A question in the shape the quiz screen displays.

    Attributes:
        id: Question id, or ``fallback-<category>`` for fallbacks.
        question: Prompt text.
        options: Option key to option text, in display order.
        correct_answer: Key of the correct option.
        explanation: Text shown after answering.
    """

    id: str
    question: str
    options: dict[str, str]
    correct_answer: str
    explanation: str = ""

    @property
    def is_fallback(self) -> bool:
        return self.id.startswith("fallback-")

    def to_dict(self) -> dict[str, Any]:
        """Convert to the presentation dictionary."""
        return {
            "id": self.id,
            "question": self.question,
            "options": dict(self.options),
            "correctAnswer": self.correct_answer,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class Question:
    """A trivia question in the catalog.

    Attributes:
        id: Unique id, carrying the category prefix (e.g. 'M12' for math).
        category: Topical partition (e.g. 'math', 'history').
        prompt: Question text.
        options: Option key to option text; at least two entries.
        correct_key: Key of the correct option.
        explanation: Text shown after answering.
    """

    id: str
    category: str
    prompt: str
    options: dict[str, str] = field(default_factory=dict)
    correct_key: str = ""
    explanation: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Question id is required")
        if not self.prompt:
            raise ValueError(f"Question {self.id} has no prompt")
        if not self.category:
            raise ValueError(f"Question {self.id} has no category")
        if len(self.options) < 2:
            raise ValueError(f"Question {self.id} needs at least two options")
        if self.correct_key not in self.options:
            raise ValueError(
                f"Question {self.id}: correct key {self.correct_key!r} is not an option"
            )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Question":
        """Create from a tabular row or a bundle entry.

        Accepts the flat ``optionA``..``optionD`` columns or a nested
        ``options`` mapping. Blank options are dropped.

        Raises:
            ValueError: If the row does not describe a valid question.
        """
        raw_options = row.get("options")
        if isinstance(raw_options, Mapping):
            pairs = [(_clean(k).upper(), _clean(v)) for k, v in raw_options.items()]
        else:
            pairs = [(key, _clean(row.get(f"option{key}"))) for key in OPTION_KEYS]

        options = {key: text for key, text in pairs if key and text}
        correct = row.get("correctAnswer") or row.get("correct_key")

        return cls(
            id=_clean(row.get("id")),
            category=_clean(row.get("category")).lower(),
            prompt=_clean(row.get("question") or row.get("prompt")),
            options=options,
            correct_key=_clean(correct).upper(),
            explanation=_clean(row.get("explanation")),
        )

    def present(self) -> PresentedQuestion:
        """Reshape into the presentation form."""
        return PresentedQuestion(
            id=self.id,
            question=self.prompt,
            options=dict(self.options),
            correct_answer=self.correct_key,
            explanation=self.explanation,
        )
