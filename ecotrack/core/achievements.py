"""Achievement Accumulator - Counters updated on each save."""

from .models import AchievementState, FootprintBreakdown


REDUCTION_BASELINE_KG = 20.0
GREEN_DAY_LIMIT_KG = 10.0


def reduction_step(total: float) -> float:
    """Score contribution of one saved day against the 20 kg baseline.

    Positive below the baseline, negative above it.
    """
    return (REDUCTION_BASELINE_KG - total) / REDUCTION_BASELINE_KG * 100


class AchievementAccumulator:
    """Holds the achievement counters. Only record_save and reset change them."""

    def __init__(self, state: AchievementState | None = None) -> None:
        self._state = state.model_copy() if state is not None else AchievementState()

    @property
    def state(self) -> AchievementState:
        return self._state.model_copy()

    def record_save(self, breakdown: FootprintBreakdown) -> AchievementState:
        """Account for one saved day.

        Args:
            breakdown: Footprint of the saved day

        Returns:
            The updated counters
        """
        current = self._state
        self._state = AchievementState(
            days_tracked=current.days_tracked + 1,
            total_reduction_pct=max(0.0, current.total_reduction_pct + reduction_step(breakdown.total)),
            green_days_count=current.green_days_count + (1 if breakdown.total < GREEN_DAY_LIMIT_KG else 0),
        )
        return self.state

    def reset(self) -> None:
        self._state = AchievementState()
