"""Time ledger, its event channel and the reward policy."""

from .events import EventBroadcaster, LedgerEvent, LedgerEventType
from .ledger import LedgerConfig, TimeLedger, format_time
from .rewards import RewardOutcome, RewardPolicy, StreakTracker

__all__ = [
    "EventBroadcaster",
    "LedgerConfig",
    "LedgerEvent",
    "LedgerEventType",
    "RewardOutcome",
    "RewardPolicy",
    "StreakTracker",
    "TimeLedger",
    "format_time",
]
