"""Application configuration.

Loads settings from ~/.brainbites/config.json, then applies BRAINBITES_*
environment overrides (a .env file is read at startup).
"""

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from .catalog import CatalogConfig
from .ledger import LedgerConfig, RewardPolicy

logger = logging.getLogger(__name__)

DEFAULT_HOME = Path.home() / ".brainbites"
DEFAULT_CONFIG_PATH = DEFAULT_HOME / "config.json"
BUNDLED_QUESTIONS = Path(__file__).parent / "catalog" / "data" / "questions.json"


@dataclass
class AppConfig:
    """Configuration for the whole app.

    Attributes:
        home_dir: Base directory for state and logs.
        db_path: SQLite file holding persisted state.
        bundle_path: Primary (JSON) question source.
        csv_paths: Secondary and tertiary CSV question sources.
        default_category: Category used when none is given.
        reset_threshold: Unused fraction below which a category recycles.
        regular_credit: Seconds earned per correct answer.
        milestone_credit: Seconds earned at a streak milestone.
        milestone_every: Streak length between milestones.
        tick_interval: Seconds between countdown debits.
        answer_time_limit: Seconds allowed to answer a question.
        log_dir: Directory for the JSONL event log.
        log_max_size_mb: Event log size that triggers archiving.
        log_keep_archives: Archived event logs kept on disk.
    """

    home_dir: Path | None = None
    db_path: Path | None = None
    bundle_path: Path | None = None
    csv_paths: list[Path] = field(default_factory=list)
    default_category: str = "funfacts"
    reset_threshold: float = 0.2
    regular_credit: int = 30
    milestone_credit: int = 120
    milestone_every: int = 5
    tick_interval: float = 1.0
    answer_time_limit: float = 10.0
    log_dir: Path | None = None
    log_max_size_mb: float = 10.0
    log_keep_archives: int = 5

    def __post_init__(self) -> None:
        """Fill in path defaults and validate values."""
        self.home_dir = Path(self.home_dir) if self.home_dir else DEFAULT_HOME
        if self.db_path is None:
            self.db_path = self.home_dir / "brainbites.db"
        if self.bundle_path is None:
            self.bundle_path = BUNDLED_QUESTIONS
        if not self.csv_paths:
            self.csv_paths = [
                self.home_dir / "data" / "questions.csv",
                Path.cwd() / "assets" / "data" / "questions.csv",
            ]
        self.csv_paths = [Path(p) for p in self.csv_paths]
        if self.log_dir is None:
            self.log_dir = self.home_dir / "logs"

        if self.answer_time_limit <= 0:
            raise ValueError("answer_time_limit must be positive")
        if self.log_max_size_mb <= 0:
            raise ValueError("log_max_size_mb must be positive")
        if self.log_keep_archives < 0:
            raise ValueError("log_keep_archives must not be negative")

        # Delegate the remaining checks to the component configs.
        self.catalog_config()
        self.ledger_config()
        self.reward_policy()

    def catalog_config(self) -> CatalogConfig:
        return CatalogConfig(
            default_category=self.default_category,
            reset_threshold=self.reset_threshold,
        )

    def ledger_config(self) -> LedgerConfig:
        return LedgerConfig(tick_interval=self.tick_interval)

    def reward_policy(self) -> RewardPolicy:
        return RewardPolicy(
            regular_credit=self.regular_credit,
            milestone_credit=self.milestone_credit,
            milestone_every=self.milestone_every,
        )


_PATH_FIELDS = {"home_dir", "db_path", "bundle_path", "log_dir"}
_INT_FIELDS = {"regular_credit", "milestone_credit", "milestone_every", "log_keep_archives"}
_FLOAT_FIELDS = {"reset_threshold", "tick_interval", "answer_time_limit", "log_max_size_mb"}
_STR_FIELDS = {"default_category"}


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw config value to the field's type."""
    if name in _PATH_FIELDS:
        return Path(value).expanduser()
    if name in _INT_FIELDS:
        return int(value)
    if name in _FLOAT_FIELDS:
        return float(value)
    if name == "csv_paths":
        if isinstance(value, str):
            value = [p for p in value.split(os.pathsep) if p]
        return [Path(p).expanduser() for p in value]
    return str(value)


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load AppConfig from a JSON file.

    The file holds a flat object with AppConfig field names:
    ```json
    {
      "default_category": "science",
      "regular_credit": 45,
      "csv_paths": ["~/quiz/questions.csv"]
    }
    ```

    Args:
        config_path: Path to config file. Uses DEFAULT_CONFIG_PATH if None.

    Returns:
        AppConfig instance with loaded values.
    """
    path = config_path or DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
        return AppConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON in %s: %s. Using defaults.", path, e)
        return AppConfig()
    except OSError as e:
        logger.warning("Cannot read %s: %s. Using defaults.", path, e)
        return AppConfig()

    if not isinstance(data, dict):
        logger.warning("Config in %s is not an object. Using defaults.", path)
        return AppConfig()

    return _parse_config(data)


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse a config dictionary, skipping unknown or invalid entries."""
    known = _PATH_FIELDS | _INT_FIELDS | _FLOAT_FIELDS | _STR_FIELDS | {"csv_paths"}
    kwargs: dict[str, Any] = {}
    for name, value in data.items():
        if name not in known:
            logger.warning("Unknown config key %r ignored", name)
            continue
        try:
            kwargs[name] = _coerce(name, value)
        except (TypeError, ValueError) as e:
            logger.warning("Invalid value for %s: %s", name, e)

    try:
        return AppConfig(**kwargs)
    except ValueError as e:
        logger.warning("Invalid config: %s. Using defaults.", e)
        return AppConfig()


ENV_PREFIX = "BRAINBITES_"


def config_from_env(base: AppConfig | None = None) -> AppConfig:
    """Apply BRAINBITES_<FIELD> environment overrides to a config.

    BRAINBITES_HOME moves every derived path along with it unless the path
    itself is overridden.
    """
    base = base or AppConfig()
    overrides: dict[str, Any] = {}

    home = os.getenv(f"{ENV_PREFIX}HOME")
    if home:
        home_dir = Path(home).expanduser()
        overrides.update(home_dir=home_dir, db_path=None, csv_paths=[], log_dir=None)

    names = (_PATH_FIELDS - {"home_dir"}) | _INT_FIELDS | _FLOAT_FIELDS | _STR_FIELDS | {"csv_paths"}
    for name in sorted(names):
        raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if raw is None or raw == "":
            continue
        try:
            overrides[name] = _coerce(name, raw)
        except ValueError as e:
            logger.warning("Invalid %s%s=%r: %s", ENV_PREFIX, name.upper(), raw, e)

    if not overrides:
        return base
    try:
        return replace(base, **overrides)
    except ValueError as e:
        logger.warning("Invalid environment config: %s. Ignoring overrides.", e)
        return base
