"""Tests for the quiz session."""

import json
import random
from pathlib import Path

import pytest

from brainbites.catalog import CSVSource, QuestionCatalog
from brainbites.errors import NoActiveQuestion
from brainbites.ledger import LedgerConfig, RewardPolicy, TimeLedger
from brainbites.logging import JSONLLogger
from brainbites.session import TIMEOUT, QuizSession, mascot_message
from brainbites.storage import KeyValueStore

CSV = """id,category,question,optionA,optionB,optionC,optionD,correctAnswer,explanation
M1,math,What is 2+2?,4,3,5,6,A,Two plus two is four.
M2,math,What is 3*3?,9,6,12,8,A,Three threes are nine.
M3,math,What is 10/2?,5,2,8,4,A,Ten halved is five.
M4,math,What is 7-4?,3,4,2,5,A,Seven minus four is three.
M5,math,What is 6+1?,7,8,6,5,A,Six plus one is seven.
"""


@pytest.fixture
def store(tmp_path: Path) -> KeyValueStore:
    store = KeyValueStore(tmp_path / "state.db")
    store.init_db()
    yield store
    store.close()


@pytest.fixture
def event_log(tmp_path: Path) -> JSONLLogger:
    return JSONLLogger(log_dir=tmp_path / "logs")


@pytest.fixture
def session(tmp_path: Path, store: KeyValueStore, event_log: JSONLLogger) -> QuizSession:
    csv_path = tmp_path / "questions.csv"
    csv_path.write_text(CSV, encoding="utf-8")
    catalog = QuestionCatalog(store, sources=[CSVSource(csv_path)], rng=random.Random(1))
    ledger = TimeLedger(store, config=LedgerConfig(tick_interval=3600))
    return QuizSession(catalog, ledger, time_limit=10.0, event_log=event_log)


def read_events(event_log: JSONLLogger) -> list[dict]:
    with open(event_log.log_path, encoding="utf-8") as f:
        return [json.loads(line) for line in f]


class TestMascotMessage:
    def test_moods(self):
        assert mascot_message(0)[0] == "depressed"
        assert mascot_message(-3)[0] == "depressed"
        assert mascot_message(59)[0] == "sad"
        assert mascot_message(60)[0] == "happy"
        assert mascot_message(3600)[0] == "happy"


@pytest.mark.asyncio
class TestQuizSession:
    async def test_next_question(self, session: QuizSession, event_log: JSONLLogger):
        question = await session.next_question("math")

        assert question.id.startswith("M")
        assert session.current is question
        events = read_events(event_log)
        assert events[-1]["event"] == "question_served"
        assert events[-1]["question_id"] == question.id
        assert events[-1]["session_id"] == session.stats.session_id

    async def test_correct_answer_credits_ledger(self, session: QuizSession):
        await session.next_question("math")

        result = session.answer("a", elapsed=0)

        assert result.correct
        assert result.selected == "A"
        assert result.credits == 30
        assert result.balance == 30
        assert result.points == 100
        assert session.ledger.balance == 30
        assert session.current is None

    async def test_points_decrease_with_time(self, session: QuizSession):
        await session.next_question("math")
        assert session.answer("A", elapsed=5).points == 75

    async def test_incorrect_answer(self, session: QuizSession):
        await session.next_question("math")
        session.answer("A", elapsed=1)
        await session.next_question("math")

        result = session.answer("B", elapsed=1)

        assert not result.correct
        assert result.credits == 0
        assert result.points == 0
        assert result.streak == 0
        assert result.balance == 30
        assert result.correct_answer == "A"
        assert result.explanation

    async def test_fifth_correct_answer_is_a_milestone(self, session: QuizSession, event_log: JSONLLogger):
        results = []
        for _ in range(5):
            await session.next_question("math")
            results.append(session.answer("A", elapsed=1))

        assert [r.credits for r in results] == [30, 30, 30, 30, 120]
        assert results[-1].milestone
        assert session.ledger.balance == 240
        assert session.stats.best_streak == 5
        assert any(e["event"] == "milestone" for e in read_events(event_log))

    async def test_custom_policy(self, session: QuizSession):
        custom = QuizSession(
            session.catalog,
            session.ledger,
            policy=RewardPolicy(regular_credit=10, milestone_credit=50, milestone_every=2),
        )
        await custom.next_question("math")
        custom.answer("A", elapsed=0)
        await custom.next_question("math")
        assert custom.answer("A", elapsed=0).credits == 50

    async def test_late_answer_counts_as_timeout(self, session: QuizSession):
        await session.next_question("math")

        result = session.answer("A", elapsed=10.5)

        assert result.timed_out
        assert not result.correct
        assert result.selected == TIMEOUT
        assert session.ledger.balance == 0

    async def test_time_up_resets_streak(self, session: QuizSession, event_log: JSONLLogger):
        await session.next_question("math")
        session.answer("A", elapsed=1)
        await session.next_question("math")

        result = session.time_up()

        assert result.timed_out
        assert session.streak == 0
        assert read_events(event_log)[-1]["extra"]["timed_out"] is True

    async def test_answer_without_question(self, session: QuizSession):
        with pytest.raises(NoActiveQuestion):
            session.answer("A")

        await session.next_question("math")
        session.answer("A", elapsed=0)
        with pytest.raises(NoActiveQuestion):
            session.answer("A", elapsed=0)

    async def test_answer_measures_elapsed_time(self, session: QuizSession):
        await session.next_question("math")
        result = session.answer("A")
        assert result.correct
        assert 50 <= result.points <= 100

    async def test_stats(self, session: QuizSession):
        await session.next_question("math")
        session.answer("A", elapsed=0)
        await session.next_question("math")
        session.answer("C", elapsed=0)

        assert session.stats.answered == 2
        assert session.stats.correct == 1
        assert session.stats.session_id.startswith("quiz-")

    async def test_fallback_question_can_be_answered(self, session: QuizSession):
        question = await session.next_question("history")

        assert question.is_fallback
        result = session.answer(question.correct_answer, elapsed=0)
        assert result.correct
        assert result.credits == 30
