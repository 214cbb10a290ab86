"""Quiz session: draws questions, scores answers, pays out credits."""

import time
import uuid
from dataclasses import dataclass, field

from ..catalog import PresentedQuestion, QuestionCatalog
from ..errors import NoActiveQuestion
from ..ledger import RewardOutcome, RewardPolicy, StreakTracker, TimeLedger
from ..logging import JSONLLogger

TIMEOUT = "TIMEOUT"
LOW_TIME_SECONDS = 60


def mascot_message(balance: int) -> tuple[str, str]:
    """Pick the mascot's mood and line for the current balance."""
    if balance <= 0:
        return "depressed", "You're out of app time! Answer questions to earn more."
    if balance < LOW_TIME_SECONDS:
        return "sad", "You're running low on time! Let's earn some more."
    return "happy", "Ready to start a quiz and earn some time?"


@dataclass
class AnswerResult:
    """Outcome of answering (or timing out on) one question."""

    question_id: str
    selected: str
    correct: bool
    timed_out: bool
    streak: int
    credits: int
    milestone: bool
    points: int
    balance: int
    correct_answer: str
    explanation: str


@dataclass
class SessionStats:
    """Running counts for one quiz session."""

    session_id: str = field(default_factory=lambda: f"quiz-{uuid.uuid4().hex[:8]}")
    answered: int = 0
    correct: int = 0
    best_streak: int = 0


class QuizSession:
    """One sitting of the quiz.

    Pulls questions from the catalog, applies the reward policy to each
    answer and credits the ledger for correct ones. The streak lives only
    as long as the session.
    """

    def __init__(
        self,
        catalog: QuestionCatalog,
        ledger: TimeLedger,
        policy: RewardPolicy | None = None,
        time_limit: float = 10.0,
        event_log: JSONLLogger | None = None,
    ) -> None:
        self.catalog = catalog
        self.ledger = ledger
        self.tracker = StreakTracker(policy)
        self.time_limit = time_limit
        self.event_log = event_log
        self.stats = SessionStats()
        self.current: PresentedQuestion | None = None
        self.category: str | None = None
        self._asked_at: float | None = None

    @property
    def streak(self) -> int:
        return self.tracker.streak

    async def next_question(self, category: str | None = None) -> PresentedQuestion:
        """Draw the next question and start its answer clock."""
        question = await self.catalog.get_random_question(category)
        self.current = question
        self.category = category or self.catalog.config.default_category
        self._asked_at = time.monotonic()

        if self.event_log:
            self.event_log.log_question_served(
                question.id,
                self.category,
                fallback=question.is_fallback,
                session_id=self.stats.session_id,
            )
        return question

    def answer(self, key: str, elapsed: float | None = None) -> AnswerResult:
        """Score an answer to the open question.

        An answer given after the time limit counts as a timeout.

        Args:
            key: Selected option key (case-insensitive).
            elapsed: Seconds taken; measured from next_question() if None.

        Raises:
            NoActiveQuestion: If there is no open question.
        """
        question = self._require_question()
        if elapsed is None:
            elapsed = self._elapsed()
        if elapsed > self.time_limit:
            return self.time_up()

        selected = key.strip().upper()
        if selected == question.correct_answer:
            outcome = self.tracker.record_correct()
        else:
            outcome = self.tracker.record_incorrect()
        return self._finish(question, selected, outcome, elapsed)

    def time_up(self) -> AnswerResult:
        """Record that the open question ran out of time."""
        question = self._require_question()
        outcome = self.tracker.record_timeout()
        return self._finish(question, TIMEOUT, outcome, self.time_limit)

    def _require_question(self) -> PresentedQuestion:
        if self.current is None:
            raise NoActiveQuestion("No question is waiting for an answer")
        return self.current

    def _elapsed(self) -> float:
        if self._asked_at is None:
            return 0.0
        return time.monotonic() - self._asked_at

    def _points(self, elapsed: float) -> int:
        """50 base points plus up to 50 for answering quickly."""
        remaining = max(0.0, 1.0 - elapsed / self.time_limit)
        return round(50 + 50 * remaining)

    def _finish(
        self,
        question: PresentedQuestion,
        selected: str,
        outcome: RewardOutcome,
        elapsed: float,
    ) -> AnswerResult:
        self.current = None
        self._asked_at = None

        balance = self.ledger.get_available_time()
        if outcome.credits:
            balance = self.ledger.add_credits(outcome.credits)

        self.stats.answered += 1
        if outcome.correct:
            self.stats.correct += 1
            self.stats.best_streak = max(self.stats.best_streak, outcome.streak)

        if self.event_log:
            self.event_log.log_answer(
                question.id,
                outcome.correct,
                streak=outcome.streak,
                delta=outcome.credits,
                balance=balance,
                timed_out=outcome.timed_out,
                session_id=self.stats.session_id,
            )
            if outcome.milestone:
                self.event_log.log_milestone(
                    outcome.streak, outcome.credits, balance, session_id=self.stats.session_id
                )

        return AnswerResult(
            question_id=question.id,
            selected=selected,
            correct=outcome.correct,
            timed_out=outcome.timed_out,
            streak=outcome.streak,
            credits=outcome.credits,
            milestone=outcome.milestone,
            points=self._points(elapsed) if outcome.correct else 0,
            balance=balance,
            correct_answer=question.correct_answer,
            explanation=question.explanation,
        )
