"""Built-in questions used when no data source is usable."""

from dataclasses import replace

from .models import PresentedQuestion, Question

SEED_ROWS: list[dict[str, str]] = [
    {
        "id": "F1",
        "category": "funfacts",
        "question": "Which planet is known as the Red Planet?",
        "optionA": "Venus",
        "optionB": "Mars",
        "optionC": "Jupiter",
        "optionD": "Saturn",
        "correctAnswer": "B",
        "explanation": "Mars is called the Red Planet because of the reddish iron oxide on its surface.",
    },
    {
        "id": "P1",
        "category": "psychology",
        "question": "What is the fear of spiders called?",
        "optionA": "Arachnophobia",
        "optionB": "Acrophobia",
        "optionC": "Agoraphobia",
        "optionD": "Aerophobia",
        "correctAnswer": "A",
        "explanation": "Arachnophobia is the intense fear of spiders and other arachnids.",
    },
    {
        "id": "M1",
        "category": "math",
        "question": "What is the square root of 144?",
        "optionA": "10",
        "optionB": "11",
        "optionC": "12",
        "optionD": "13",
        "correctAnswer": "C",
        "explanation": "The square root of 144 is 12 because 12 x 12 = 144.",
    },
    {
        "id": "S1",
        "category": "science",
        "question": "What is the chemical symbol for gold?",
        "optionA": "Au",
        "optionB": "Ag",
        "optionC": "Fe",
        "optionD": "Ge",
        "correctAnswer": "A",
        "explanation": "The chemical symbol for gold is Au, from the Latin word 'aurum'.",
    },
    {
        "id": "H1",
        "category": "history",
        "question": "Who was the first President of the United States?",
        "optionA": "Thomas Jefferson",
        "optionB": "John Adams",
        "optionC": "George Washington",
        "optionD": "Benjamin Franklin",
        "correctAnswer": "C",
        "explanation": "George Washington served as the first President of the United States from 1789 to 1797.",
    },
    {
        "id": "E1",
        "category": "english",
        "question": 'What is the past tense of the verb "to go"?',
        "optionA": "Gone",
        "optionB": "Went",
        "optionC": "Going",
        "optionD": "Goed",
        "correctAnswer": "B",
        "explanation": 'The past tense of "to go" is "went", while "gone" is the past participle.',
    },
    {
        "id": "G1",
        "category": "general",
        "question": "Which is the largest ocean on Earth?",
        "optionA": "Atlantic Ocean",
        "optionB": "Indian Ocean",
        "optionC": "Southern Ocean",
        "optionD": "Pacific Ocean",
        "correctAnswer": "D",
        "explanation": "The Pacific Ocean is the largest and deepest ocean, covering more than 30% of the Earth's surface.",
    },
]


def seed_questions() -> list[Question]:
    """The built-in seed set, one question per default category."""
    return [Question.from_row(row) for row in SEED_ROWS]


def _fallback(category: str, question: str, options: list[str], answer: str, explanation: str) -> PresentedQuestion:
    return PresentedQuestion(
        id=f"fallback-{category}",
        question=question,
        options=dict(zip("ABCD", options)),
        correct_answer=answer,
        explanation=explanation,
    )


FALLBACK_QUESTIONS: dict[str, PresentedQuestion] = {
    "funfacts": _fallback(
        "funfacts",
        "Which planet is closest to the Sun?",
        ["Earth", "Venus", "Mercury", "Mars"],
        "C",
        "Mercury is the closest planet to the Sun in our solar system.",
    ),
    "psychology": _fallback(
        "psychology",
        "What is the study of dreams called?",
        ["Oneirology", "Neurology", "Psychology", "Psychiatry"],
        "A",
        "Oneirology is the scientific study of dreams.",
    ),
    "math": _fallback(
        "math",
        "What is 7 multiplied by 8?",
        ["54", "56", "58", "64"],
        "B",
        "7 x 8 = 56.",
    ),
    "science": _fallback(
        "science",
        "What gas do plants absorb from the atmosphere?",
        ["Oxygen", "Nitrogen", "Carbon dioxide", "Helium"],
        "C",
        "Plants take in carbon dioxide and release oxygen during photosynthesis.",
    ),
    "history": _fallback(
        "history",
        "In which year did World War II end?",
        ["1942", "1945", "1948", "1950"],
        "B",
        "World War II ended in 1945.",
    ),
    "english": _fallback(
        "english",
        "Which word is a synonym of 'happy'?",
        ["Joyful", "Angry", "Tired", "Bored"],
        "A",
        "'Joyful' means feeling great happiness.",
    ),
    "general": _fallback(
        "general",
        "How many continents are there on Earth?",
        ["5", "6", "7", "8"],
        "C",
        "The seven continents are Africa, Antarctica, Asia, Australia, Europe, North America and South America.",
    ),
    "default": _fallback(
        "default",
        "What is the capital of France?",
        ["London", "Berlin", "Paris", "Madrid"],
        "C",
        "Paris is the capital and largest city of France.",
    ),
}


def get_fallback_question(category: str) -> PresentedQuestion:
    """Hardcoded question for a category, or the global default.

    Returns a fresh copy so callers cannot alter the shared table.
    """
    question = FALLBACK_QUESTIONS.get(category, FALLBACK_QUESTIONS["default"])
    return replace(question, options=dict(question.options))
