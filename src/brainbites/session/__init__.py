"""Quiz session orchestration."""

from .quiz import TIMEOUT, AnswerResult, QuizSession, SessionStats, mascot_message

__all__ = ["TIMEOUT", "AnswerResult", "QuizSession", "SessionStats", "mascot_message"]
