"""Tracker - Session state and the operations that change it.

EcoTracker owns the form, the personal target, the history ledger, the weekly
window and the achievement counters. Every mutation goes through one of its
methods. What it hands out is either a frozen value or a fresh list of them.
"""

import logging
from datetime import date, datetime
from typing import Any

from .achievements import AchievementAccumulator
from .emissions import build_input, compute_footprint, parse_amount
from .feedback import (
    classify_footprint,
    evaluate_badges,
    evaluate_tips,
    is_star_day,
    target_progress_pct,
)
from .ledger import HistoryLedger
from .models import (
    CLEAR_HISTORY_PLACEHOLDERS,
    DEFAULT_TARGET,
    FACTORY_RESET_PLACEHOLDERS,
    INITIAL_PLACEHOLDERS,
    Badge,
    FootprintBreakdown,
    FootprintInput,
    FootprintReport,
    HistoryEntry,
    ReportDay,
    ResetLevel,
    ResetResult,
    SaveResult,
    TrackerSnapshot,
    TrackerState,
)
from .weekly import PlaceholderGenerator, WeeklyWindow, random_placeholder


logger = logging.getLogger(__name__)

DISPLAY_HISTORY_LIMIT = 5
REPORT_HISTORY_LIMIT = 10

SAVED_MESSAGE = "Data saved successfully!"
FORM_CLEARED_MESSAGE = "Form cleared."
TODAY_RESET_MESSAGE = "Today's data reset."
HISTORY_CLEARED_MESSAGE = "All history cleared! Weekly data reset."
FACTORY_RESET_MESSAGE = "Complete factory reset successful!"
CLEAR_HISTORY_PROMPT = "This will delete ALL your tracking history. Are you sure?"
FACTORY_RESET_PROMPT = "This will reset EVERYTHING including your personal target. Are you absolutely sure?"


def parse_target(raw: object) -> float:
    """Parse a personal target, falling back to the default for unusable values."""
    value = parse_amount(raw)
    return value if value > 0 else DEFAULT_TARGET


class EcoTracker:
    """Footprint tracking engine for one session."""

    def __init__(
        self,
        state: TrackerState | None = None,
        generator: PlaceholderGenerator = random_placeholder,
        today: date | None = None,
    ) -> None:
        """Initialize the tracker.

        Args:
            state: Previously serialized state (None for a fresh session)
            generator: Placeholder source for weekly window seeding
            today: Current date, used to seed a fresh weekly window

        Raises:
            StateInvariantViolation: If state holds duplicate dates or a malformed week
        """
        state = state or TrackerState()
        self._generator = generator
        self._form = state.form.model_copy()
        self._target = state.personal_target
        self._ledger = HistoryLedger(state.history)
        if state.week:
            self._window = WeeklyWindow(state.week)
        else:
            self._window = WeeklyWindow.initialize(today, generator)
        self._achievements = AchievementAccumulator(state.achievements)

    # ==================== Form & Target ====================

    @property
    def form(self) -> FootprintInput:
        return self._form.model_copy()

    @property
    def personal_target(self) -> float:
        return self._target

    def update_form(
        self,
        distance: object = None,
        electricity: object = None,
        diet_type: object = None,
    ) -> FootprintBreakdown:
        """Replace the form inputs. Bad values are clamped to zero.

        Returns:
            Breakdown for the new inputs
        """
        self._form = build_input(distance, electricity, diet_type)
        logger.debug("Form updated: %s", self._form)
        return self.breakdown

    def clear_form(self) -> None:
        self._form = FootprintInput()

    def set_target(self, raw: object) -> float:
        """Set the personal target. Unusable values reset it to the default."""
        self._target = parse_target(raw)
        logger.info("Personal target set to %.1f kg", self._target)
        return self._target

    # ==================== Derived Views ====================

    @property
    def breakdown(self) -> FootprintBreakdown:
        return compute_footprint(self._form)

    @property
    def badges(self) -> list[Badge]:
        return evaluate_badges(self._form, self.breakdown, self._target)

    @property
    def tips(self) -> list[str]:
        return evaluate_tips(self._form, self.breakdown)

    @property
    def week(self) -> WeeklyWindow:
        """A detached copy of the weekly window."""
        return WeeklyWindow(self._window.slots)

    def refresh_week(self, today: date | None = None) -> bool:
        """Roll the weekly window forward after a day change.

        Slots for dates still inside the new week keep their values; new days
        get placeholders.

        Returns:
            True if the window was rebuilt
        """
        if today is None:
            today = date.today()
        if self._window.is_current(today):
            return False

        previous = {s.slot_date: s.footprint for s in self._window.slots}
        window = WeeklyWindow.initialize(today, self._generator)
        for slot in window.slots:
            if slot.slot_date in previous:
                window.record_today(previous[slot.slot_date], slot.slot_date)
        self._window = window

        logger.info("Weekly window rolled forward to %s", today)
        return True

    def history(self, limit: int | None = None) -> list[HistoryEntry]:
        return self._ledger.list(limit)

    def snapshot(self) -> TrackerSnapshot:
        """Read-only dashboard view of the session."""
        breakdown = self.breakdown
        return TrackerSnapshot(
            form=self.form,
            breakdown=breakdown,
            personal_target=self._target,
            band=classify_footprint(breakdown.total, self._target),
            progress_pct=target_progress_pct(breakdown.total, self._target),
            target_gap=self._target - breakdown.total,
            badges=evaluate_badges(self._form, breakdown, self._target),
            tips=evaluate_tips(self._form, breakdown),
            recent_history=self._ledger.list(DISPLAY_HISTORY_LIMIT),
            week=self._window.slots,
            weekly_average=self._window.average(),
            weekly_max=self._window.maximum(),
            achievements=self._achievements.state,
        )

    # ==================== Save ====================

    def save_today(self, today: date | None = None) -> SaveResult:
        """Save the current form as today's entry.

        Writes the ledger, today's weekly slot and the achievement counters.

        Args:
            today: Date to save under (defaults to today)

        Returns:
            SaveResult with the stored entry
        """
        if today is None:
            today = date.today()

        breakdown = self.breakdown
        entry = HistoryEntry(
            entry_date=today,
            footprint=breakdown.total,
            distance_km=self._form.distance_km,
            electricity_kwh=self._form.electricity_kwh,
            diet_type=self._form.diet_type,
        )

        self._ledger.upsert(entry)
        week_updated = self._window.record_today(breakdown.total, today)
        self._achievements.record_save(breakdown)

        logger.info("Saved %.2f kg for %s", breakdown.total, today)
        return SaveResult(entry=entry, week_updated=week_updated, message=SAVED_MESSAGE)

    # ==================== Resets ====================

    def reset_form(self) -> ResetResult:
        self.clear_form()
        return ResetResult(level=ResetLevel.CLEAR_FORM, applied=True, message=FORM_CLEARED_MESSAGE)

    def reset_today(self, today: date | None = None) -> ResetResult:
        """Clear the form and drop today's saved data."""
        if today is None:
            today = date.today()

        self.clear_form()
        self._ledger.remove_by_date(today)
        self._window.record_today(self._generator(INITIAL_PLACEHOLDERS), today)

        logger.info("Reset data for %s", today)
        return ResetResult(level=ResetLevel.RESET_TODAY, applied=True, message=TODAY_RESET_MESSAGE)

    def clear_all_history(self, confirmed: bool = False, today: date | None = None) -> ResetResult:
        """Delete history and achievements and re-seed the week over 3-17 kg.

        Nothing happens unless the caller confirmed. Target and form are kept.
        """
        if not confirmed:
            return ResetResult(level=ResetLevel.CLEAR_HISTORY, applied=False, message=CLEAR_HISTORY_PROMPT)

        self._ledger.clear()
        self._window.reset_with_fresh_placeholders(CLEAR_HISTORY_PLACEHOLDERS, today, self._generator)
        self._achievements.reset()

        logger.info("History cleared")
        return ResetResult(level=ResetLevel.CLEAR_HISTORY, applied=True, message=HISTORY_CLEARED_MESSAGE)

    def factory_reset(self, confirmed: bool = False, today: date | None = None) -> ResetResult:
        """Reset everything, re-seeding the week over 2-21 kg.

        Nothing happens unless the caller confirmed.
        """
        if not confirmed:
            return ResetResult(level=ResetLevel.FACTORY_RESET, applied=False, message=FACTORY_RESET_PROMPT)

        self.clear_form()
        self._ledger.clear()
        self._achievements.reset()
        self._target = DEFAULT_TARGET
        self._window.reset_with_fresh_placeholders(FACTORY_RESET_PLACEHOLDERS, today, self._generator)

        logger.info("Factory reset complete")
        return ResetResult(level=ResetLevel.FACTORY_RESET, applied=True, message=FACTORY_RESET_MESSAGE)

    def reset(self, level: ResetLevel, confirmed: bool = False, today: date | None = None) -> ResetResult:
        """Run the reset for a level."""
        level = ResetLevel(level)
        if level == ResetLevel.CLEAR_FORM:
            return self.reset_form()
        if level == ResetLevel.RESET_TODAY:
            return self.reset_today(today)
        if level == ResetLevel.CLEAR_HISTORY:
            return self.clear_all_history(confirmed, today)
        return self.factory_reset(confirmed, today)

    # ==================== Export ====================

    def build_report(self, generated_at: datetime | None = None) -> FootprintReport:
        """Assemble formatting-ready report data. Does not change any state.

        Args:
            generated_at: Report timestamp (defaults to now)

        Returns:
            FootprintReport
        """
        if generated_at is None:
            generated_at = datetime.now()

        breakdown = self.breakdown

        return FootprintReport(
            generated_at=generated_at,
            form=self.form,
            breakdown=breakdown,
            personal_target=self._target,
            target_achieved=breakdown.total <= self._target,
            week=[
                ReportDay(
                    day_label=s.day_label,
                    slot_date=s.slot_date,
                    footprint=s.footprint,
                    star=is_star_day(s.footprint, self._target),
                )
                for s in self._window.slots
            ],
            weekly_average=self._window.average(),
            achievements=self._achievements.state,
            badges=evaluate_badges(self._form, breakdown, self._target),
            tips=evaluate_tips(self._form, breakdown),
            history=self._ledger.list(REPORT_HISTORY_LIMIT),
        )

    # ==================== Serialization ====================

    def to_state(self) -> TrackerState:
        return TrackerState(
            form=self.form,
            personal_target=self._target,
            history=self._ledger.list(),
            week=self._window.slots,
            achievements=self._achievements.state,
        )

    def to_dict(self) -> dict[str, Any]:
        """Full state as a plain JSON-compatible value."""
        return self.to_state().model_dump(mode="json")

    @classmethod
    def from_state(
        cls, state: TrackerState, generator: PlaceholderGenerator = random_placeholder
    ) -> "EcoTracker":
        return cls(state, generator)

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], generator: PlaceholderGenerator = random_placeholder
    ) -> "EcoTracker":
        """Rebuild a tracker from to_dict output.

        Raises:
            pydantic.ValidationError: If a field is missing or out of range
            StateInvariantViolation: If the ledger or window invariants are broken
        """
        return cls.from_state(TrackerState.model_validate(data), generator)
