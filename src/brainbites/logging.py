"""JSONL event log for quiz sessions."""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class LogEntry:
    """A single log entry."""

    timestamp: str
    event: str
    session_id: str | None = None
    category: str | None = None
    question_id: str | None = None
    balance: int | None = None
    delta: int | None = None
    streak: int | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None and v != {} and v != []}


class JSONLLogger:
    """Append-only quiz event log, one JSON object per line.

    When the active file reaches ``max_size_mb`` it is archived as
    ``<stem>_<utc timestamp>.jsonl`` and only the newest ``keep_archives``
    archives are kept. A log directory that cannot be written disables the
    event log with a warning; the quiz keeps running.
    """

    def __init__(
        self,
        log_dir: str | Path | None = None,
        filename: str = "events.jsonl",
        max_size_mb: float = 10.0,
        keep_archives: int = 5,
    ) -> None:
        if log_dir is None:
            log_dir = Path.home() / ".brainbites" / "logs"
        if max_size_mb <= 0:
            raise ValueError("max_size_mb must be positive")
        if keep_archives < 0:
            raise ValueError("keep_archives must not be negative")
        self.log_dir = Path(log_dir)
        self.filename = filename
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)
        self.keep_archives = keep_archives
        self._current_session_id: str | None = None
        self.enabled = True
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._disable(e)

    @property
    def log_path(self) -> Path:
        """Current log file path."""
        return self.log_dir / self.filename

    def archives(self) -> list[Path]:
        """Archived log files, oldest first."""
        stem = Path(self.filename).stem
        return sorted(self.log_dir.glob(f"{stem}_*.jsonl"))

    def set_session_id(self, session_id: str | None) -> None:
        """Set the current session_id for all subsequent logs."""
        self._current_session_id = session_id

    def _disable(self, error: OSError) -> None:
        self.enabled = False
        logger.warning("Event log disabled, cannot write to %s: %s", self.log_dir, error)

    def _archive_if_full(self) -> None:
        if not self.log_path.exists() or self.log_path.stat().st_size < self.max_size_bytes:
            return

        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
        self.log_path.rename(self.log_dir / f"{self.log_path.stem}_{timestamp}.jsonl")

        archives = self.archives()
        for old in archives[: max(0, len(archives) - self.keep_archives)]:
            old.unlink(missing_ok=True)

    def _write(self, entry: LogEntry) -> None:
        if not self.enabled:
            return
        try:
            self._archive_if_full()
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")
        except OSError as e:
            self._disable(e)

    def log(
        self,
        event: str,
        *,
        session_id: str | None = None,
        category: str | None = None,
        question_id: str | None = None,
        balance: int | None = None,
        delta: int | None = None,
        streak: int | None = None,
        error: str | None = None,
        **extra: Any,
    ) -> None:
        """Log an event. Extra fields set to None are dropped."""
        extra = {k: v for k, v in extra.items() if v is not None}
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event=event,
            session_id=session_id or self._current_session_id,
            category=category,
            question_id=question_id,
            balance=balance,
            delta=delta,
            streak=streak,
            error=error,
            extra=extra if extra else {},
        )
        self._write(entry)

    def log_question_served(
        self,
        question_id: str,
        category: str,
        *,
        fallback: bool = False,
        session_id: str | None = None,
    ) -> None:
        """Log a question handed to the player."""
        self.log(
            "question_served",
            session_id=session_id,
            question_id=question_id,
            category=category,
            fallback=fallback or None,
        )

    def log_answer(
        self,
        question_id: str,
        correct: bool,
        *,
        streak: int,
        delta: int = 0,
        balance: int | None = None,
        timed_out: bool = False,
        session_id: str | None = None,
    ) -> None:
        """Log an answer and what it earned."""
        self.log(
            "answer",
            session_id=session_id,
            question_id=question_id,
            streak=streak,
            delta=delta or None,
            balance=balance,
            correct=correct,
            timed_out=timed_out or None,
        )

    def log_milestone(
        self,
        streak: int,
        delta: int,
        balance: int,
        *,
        session_id: str | None = None,
    ) -> None:
        """Log a streak milestone."""
        self.log("milestone", session_id=session_id, streak=streak, delta=delta, balance=balance)


# Global logger instance
_logger: JSONLLogger | None = None


def get_logger() -> JSONLLogger:
    """Get the global logger instance."""
    global _logger
    if _logger is None:
        _logger = JSONLLogger()
    return _logger


def configure_logger(
    log_dir: str | Path | None = None,
    max_size_mb: float = 10.0,
    keep_archives: int = 5,
) -> JSONLLogger:
    """Configure and return the global logger."""
    global _logger
    _logger = JSONLLogger(log_dir=log_dir, max_size_mb=max_size_mb, keep_archives=keep_archives)
    return _logger
