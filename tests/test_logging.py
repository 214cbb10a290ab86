"""Tests for JSONL logging."""

import json
import tempfile
from pathlib import Path

import pytest

from brainbites.logging import JSONLLogger, LogEntry, configure_logger, get_logger


@pytest.fixture
def temp_log_dir():
    """Create a temporary directory for logs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def logger(temp_log_dir: Path) -> JSONLLogger:
    return JSONLLogger(log_dir=temp_log_dir)


def read_entries(logger: JSONLLogger) -> list[dict]:
    with open(logger.log_path, encoding="utf-8") as f:
        return [json.loads(line) for line in f]


def test_log_entry_to_dict():
    """Test LogEntry excludes None values."""
    entry = LogEntry(timestamp="2024-01-01T00:00:00Z", event="test")
    data = entry.to_dict()

    assert "timestamp" in data
    assert "event" in data
    assert "session_id" not in data  # None excluded
    assert "extra" not in data  # Empty dict excluded


def test_log_entry_keeps_zero_values():
    """Test that a zero balance is not mistaken for a missing one."""
    entry = LogEntry(timestamp="2024-01-01T00:00:00Z", event="tick", balance=0, streak=0)
    data = entry.to_dict()

    assert data["balance"] == 0
    assert data["streak"] == 0


def test_log_creates_file(logger: JSONLLogger):
    """Test that logging creates the log file."""
    logger.log("test_event")

    assert logger.log_path.exists()


def test_log_writes_jsonl(logger: JSONLLogger):
    """Test that logs are written in JSONL format."""
    logger.log("event1", session_id="quiz-1")
    logger.log("event2", session_id="quiz-2")

    entries = read_entries(logger)

    assert len(entries) == 2
    assert entries[0]["event"] == "event1"
    assert entries[0]["session_id"] == "quiz-1"
    assert entries[1]["event"] == "event2"


def test_log_question_served(logger: JSONLLogger):
    """Test logging a served question."""
    logger.log_question_served("M1", "math", session_id="quiz-1")
    logger.log_question_served("fallback-math", "math", fallback=True)

    first, second = read_entries(logger)

    assert first["event"] == "question_served"
    assert first["question_id"] == "M1"
    assert first["category"] == "math"
    assert "extra" not in first
    assert second["extra"]["fallback"] is True


def test_log_answer(logger: JSONLLogger):
    """Test logging an answer with its credits."""
    logger.log_answer("M1", True, streak=3, delta=30, balance=90)

    entry = read_entries(logger)[0]

    assert entry["event"] == "answer"
    assert entry["streak"] == 3
    assert entry["delta"] == 30
    assert entry["balance"] == 90
    assert entry["extra"] == {"correct": True}


def test_log_timed_out_answer(logger: JSONLLogger):
    """Test that a timeout is flagged and no delta is written."""
    logger.log_answer("M1", False, streak=0, balance=0, timed_out=True)

    entry = read_entries(logger)[0]

    assert "delta" not in entry
    assert entry["extra"] == {"correct": False, "timed_out": True}


def test_log_milestone(logger: JSONLLogger):
    """Test logging a streak milestone."""
    logger.log_milestone(5, 120, 240)

    entry = read_entries(logger)[0]

    assert entry["event"] == "milestone"
    assert entry["streak"] == 5
    assert entry["delta"] == 120
    assert entry["balance"] == 240


def test_set_session_id(logger: JSONLLogger):
    """Test that set_session_id applies to subsequent logs."""
    logger.set_session_id("quiz-42")
    logger.log("event1")
    logger.log("event2", session_id="quiz-override")

    first, second = read_entries(logger)

    assert first["session_id"] == "quiz-42"
    assert second["session_id"] == "quiz-override"


def test_rotation(temp_log_dir: Path):
    """Test log rotation when max size is exceeded."""
    logger = JSONLLogger(log_dir=temp_log_dir, max_size_mb=0.001)  # ~1KB

    for i in range(100):
        logger.log(f"event_{i}", data="x" * 100)

    assert logger.log_path.exists()
    assert len(logger.archives()) >= 1


def test_extra_fields(logger: JSONLLogger):
    """Test that extra fields are included and None extras dropped."""
    logger.log("custom", custom_field="value", another=123, missing=None)

    entry = read_entries(logger)[0]

    assert entry["extra"] == {"custom_field": "value", "another": 123}


def test_configure_logger(temp_log_dir: Path, monkeypatch):
    """Test that configure_logger replaces the global logger."""
    monkeypatch.setattr("brainbites.logging._logger", None)
    configured = configure_logger(temp_log_dir / "logs")

    assert get_logger() is configured
    assert configured.log_dir == temp_log_dir / "logs"
    assert configured.log_dir.is_dir()


def test_rotation_keeps_newest_archives(temp_log_dir: Path):
    """Test that only keep_archives archived logs survive."""
    logger = JSONLLogger(log_dir=temp_log_dir, max_size_mb=0.001, keep_archives=2)

    for i in range(200):
        logger.log(f"event_{i}", data="x" * 100)

    archives = logger.archives()
    assert len(archives) == 2
    assert archives == sorted(archives)

    newest = archives[-1].read_text(encoding="utf-8").splitlines()
    assert json.loads(newest[-1])["event"] != "event_0"


def test_invalid_settings_rejected(temp_log_dir: Path):
    """Test that size and archive limits are validated."""
    with pytest.raises(ValueError):
        JSONLLogger(log_dir=temp_log_dir, max_size_mb=0)
    with pytest.raises(ValueError):
        JSONLLogger(log_dir=temp_log_dir, keep_archives=-1)


def test_unwritable_log_dir_disables_logging(temp_log_dir: Path, caplog):
    """Test that a log dir that cannot be created turns logging off quietly."""
    blocker = temp_log_dir / "blocker"
    blocker.write_text("file", encoding="utf-8")

    logger = JSONLLogger(log_dir=blocker / "logs")
    logger.log("session_start")

    assert logger.enabled is False
    assert "Event log disabled" in caplog.text
