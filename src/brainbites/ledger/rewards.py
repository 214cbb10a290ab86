"""Streak tracking and the credit reward policy."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RewardPolicy:
    """How many credits an answer earns.

    Attributes:
        regular_credit: Seconds for an ordinary correct answer.
        milestone_credit: Seconds when the streak hits a milestone.
        milestone_every: Streak length between milestones.
    """

    regular_credit: int = 30
    milestone_credit: int = 120
    milestone_every: int = 5

    def __post_init__(self) -> None:
        for name in ("regular_credit", "milestone_credit", "milestone_every"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer")

    def is_milestone(self, streak: int) -> bool:
        return streak > 0 and streak % self.milestone_every == 0

    def credits_for(self, streak: int) -> int:
        """Credits for a correct answer that brought the streak to `streak`."""
        return self.milestone_credit if self.is_milestone(streak) else self.regular_credit


@dataclass(frozen=True)
class RewardOutcome:
    """What a single answer did to the streak and the balance."""

    correct: bool
    streak: int
    credits: int = 0
    milestone: bool = False
    timed_out: bool = False


class StreakTracker:
    """Counts consecutive correct answers within a session."""

    def __init__(self, policy: RewardPolicy | None = None) -> None:
        self.policy = policy or RewardPolicy()
        self.streak = 0

    def record_correct(self) -> RewardOutcome:
        self.streak += 1
        return RewardOutcome(
            correct=True,
            streak=self.streak,
            credits=self.policy.credits_for(self.streak),
            milestone=self.policy.is_milestone(self.streak),
        )

    def record_incorrect(self) -> RewardOutcome:
        self.streak = 0
        return RewardOutcome(correct=False, streak=0)

    def record_timeout(self) -> RewardOutcome:
        self.streak = 0
        return RewardOutcome(correct=False, streak=0, timed_out=True)

    def reset(self) -> None:
        self.streak = 0
