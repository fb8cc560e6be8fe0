"""Streak milestone achievements."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from caloritrack.models.tracking import Achievement


@dataclass(frozen=True)
class StreakMilestone:
    days: int
    title: str
    description: str

    @property
    def achievement_id(self) -> str:
        return f"streak_{self.days}"

    @property
    def rarity(self) -> str:
        return "rare" if self.days >= 14 else "common"


STREAK_MILESTONES = (
    StreakMilestone(3, "First Steps", "Completed a 3 day streak!"),
    StreakMilestone(7, "Weekly Win", "Completed a 7 day streak!"),
    StreakMilestone(14, "Two Week Progress", "Completed a 14 day streak!"),
    StreakMilestone(30, "Monthly Victory", "Completed a 30 day streak!"),
)


def check_milestones(
    current_streak: int,
    existing: Iterable[Achievement],
    now: Optional[datetime] = None,
) -> List[Achievement]:
    """
    Achievements newly earned by ``current_streak``.

    A milestone fires only when the streak equals its length exactly, and
    only if its id is not already unlocked. The caller appends the result
    to the stored set.
    """
    unlocked = {achievement.id for achievement in existing}
    now = now or datetime.now(timezone.utc)

    return [
        Achievement(
            id=milestone.achievement_id,
            title=milestone.title,
            description=milestone.description,
            icon="fire",
            unlocked_at=now,
            category="streak",
            rarity=milestone.rarity,
        )
        for milestone in STREAK_MILESTONES
        if current_streak == milestone.days and milestone.achievement_id not in unlocked
    ]


def merge_achievements(existing: Iterable[Achievement], new: Iterable[Achievement]) -> List[Achievement]:
    """Append ``new`` to ``existing``, dropping ids already present."""
    merged = list(existing)
    seen = {achievement.id for achievement in merged}
    for achievement in new:
        if achievement.id not in seen:
            merged.append(achievement)
            seen.add(achievement.id)
    return merged
