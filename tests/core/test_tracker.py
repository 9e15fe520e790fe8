"""Unit tests for the tracker - saves, resets, reports and serialization."""

import pytest
from datetime import date, datetime, timedelta
from pydantic import ValidationError

from ecotrack.core.errors import StateInvariantViolation
from ecotrack.core.models import (
    CLEAR_HISTORY_PLACEHOLDERS,
    FACTORY_RESET_PLACEHOLDERS,
    INITIAL_PLACEHOLDERS,
    AchievementState,
    DietType,
    FootprintBand,
    FootprintInput,
    PlaceholderRange,
    ResetLevel,
)
from ecotrack.core.tracker import EcoTracker, parse_target


TODAY = date(2024, 12, 28)


def low_end(placeholder_range: PlaceholderRange) -> float:
    return placeholder_range.low


@pytest.fixture
def tracker():
    """Fresh tracker with a window ending on TODAY and low-end placeholders."""
    return EcoTracker(generator=low_end, today=TODAY)


def _save_days(tracker, days):
    for offset, (distance, electricity, diet) in enumerate(days):
        tracker.update_form(distance, electricity, diet)
        tracker.save_today(TODAY - timedelta(days=len(days) - 1 - offset))


class TestForm:
    """Tests for form updates and derived feedback."""

    def test_update_form_clamps(self):
        """Bad values become zero instead of failing."""
        breakdown = EcoTracker(generator=low_end, today=TODAY).update_form("", "abc", "vegetarian")
        assert breakdown.total == pytest.approx(2.9)

    def test_badges_and_tips_follow_form(self, tracker):
        """Derived views recompute from the current form."""
        tracker.update_form(0, 3, "vegetarian")
        titles = [b.title for b in tracker.badges]
        assert titles == ["Eco Champion", "Car-Free Day", "Plant Powered", "Energy Saver"]
        assert len(tracker.tips) <= 3

    def test_snapshot(self, tracker):
        """Snapshot carries band, progress and recent history."""
        tracker.update_form(20, 10, "non-veg")
        snapshot = tracker.snapshot()

        assert snapshot.breakdown.total == pytest.approx(19.6)
        assert snapshot.band == FootprintBand.HIGH
        assert snapshot.progress_pct == 100
        assert snapshot.target_gap == pytest.approx(-4.6)
        assert len(snapshot.week) == 7
        assert snapshot.recent_history == []


class TestTarget:
    """Tests for the personal target."""

    def test_set_target(self, tracker):
        """Target changes the tier thresholds."""
        tracker.update_form(30, 5, "mixed")  # 6.3 + 4.1 + 4.7 = 15.1
        assert "Target Achieved" not in [b.title for b in tracker.badges]
        tracker.set_target("18")
        assert "Target Achieved" in [b.title for b in tracker.badges]

    def test_invalid_target_restores_default(self):
        """Unparsable or non-positive targets fall back to 15."""
        assert parse_target("nope") == 15
        assert parse_target(0) == 15
        assert parse_target("12.5") == 12.5

    def test_target_does_not_change_footprint(self, tracker):
        """The target is only a threshold."""
        tracker.update_form(10, 10, "mixed")
        before = tracker.breakdown
        tracker.set_target(40)
        assert tracker.breakdown == before


class TestSaveToday:
    """Tests for EcoTracker.save_today."""

    def test_save_writes_all_views(self, tracker):
        """Saving updates the ledger, today's slot and achievements."""
        tracker.update_form(0, 3, "vegetarian")
        result = tracker.save_today(TODAY)

        assert result.week_updated is True
        assert result.message == "Data saved successfully!"
        assert tracker.history()[0].footprint == pytest.approx(5.36)
        assert tracker.week.slots[-1].footprint == pytest.approx(5.36)
        assert tracker.snapshot().achievements.days_tracked == 1
        assert tracker.snapshot().achievements.green_days_count == 1

    def test_resave_replaces_entry_but_counts_again(self, tracker):
        """One ledger entry per day, while every save is counted."""
        tracker.update_form(0, 3, "vegetarian")
        tracker.save_today(TODAY)
        tracker.update_form(40, 3, "non-veg")
        tracker.save_today(TODAY)

        assert len(tracker.history()) == 1
        assert tracker.history()[0].diet_type == DietType.NON_VEG
        assert tracker.snapshot().achievements.days_tracked == 2

    def test_stale_window_still_saves_history(self, tracker):
        """A save after midnight reaches the ledger even if the window is stale."""
        result = tracker.save_today(TODAY + timedelta(days=1))
        assert result.week_updated is False
        assert len(tracker.history()) == 1


class TestDetachedViews:
    """Values handed out by the tracker cannot change its state."""

    def test_history_entry_is_frozen(self, tracker):
        """Assigning to a returned entry fails and the ledger keeps its value."""
        _save_days(tracker, [(10, 5, "mixed")])
        before = tracker.to_state()

        with pytest.raises(ValidationError):
            tracker.history()[0].footprint = 999

        assert tracker.to_state() == before

    def test_snapshot_slot_is_frozen(self, tracker):
        """Assigning to a snapshot slot fails and the window keeps its value."""
        before = tracker.to_state()

        with pytest.raises(ValidationError):
            tracker.snapshot().week[0].footprint = -5

        assert tracker.to_state() == before

    def test_form_is_frozen(self, tracker):
        """The returned form cannot change the tracker's inputs."""
        tracker.update_form(10, 5, "mixed")

        with pytest.raises(ValidationError):
            tracker.form.distance_km = 50

        assert tracker.form.distance_km == 10

    def test_snapshot_lists_are_fresh(self, tracker):
        """Editing snapshot lists leaves the tracker untouched."""
        _save_days(tracker, [(10, 5, "mixed")])
        before = tracker.to_state()
        snapshot = tracker.snapshot()

        snapshot.week.clear()
        snapshot.recent_history.clear()

        assert tracker.to_state() == before
        assert len(tracker.snapshot().week) == 7
        assert len(tracker.history()) == 1


class TestRefreshWeek:
    """Tests for EcoTracker.refresh_week."""

    def test_current_window_untouched(self, tracker):
        """Nothing happens on the same day."""
        assert tracker.refresh_week(TODAY) is False

    def test_rollover_keeps_overlapping_days(self, tracker):
        """Days still inside the new week keep their values."""
        tracker.update_form(0, 3, "vegetarian")
        tracker.save_today(TODAY)

        assert tracker.refresh_week(TODAY + timedelta(days=2)) is True

        slots = tracker.week.slots
        assert slots[-1].slot_date == TODAY + timedelta(days=2)
        assert slots[4].footprint == pytest.approx(5.36)
        assert slots[-1].footprint == INITIAL_PLACEHOLDERS.low


class TestResets:
    """Tests for the four reset levels."""

    def test_clear_form(self, tracker):
        """Clear form only touches the form."""
        tracker.update_form(12, 7, "non-veg")
        tracker.save_today(TODAY)
        result = tracker.reset(ResetLevel.CLEAR_FORM)

        assert result.applied
        assert tracker.form == FootprintInput()
        assert len(tracker.history()) == 1

    def test_reset_today(self, tracker):
        """Reset today drops today's entry and re-seeds today's slot."""
        _save_days(tracker, [(10, 5, "mixed"), (0, 3, "vegetarian")])

        result = tracker.reset_today(TODAY)

        assert result.applied
        assert [e.entry_date for e in tracker.history()] == [TODAY - timedelta(days=1)]
        assert tracker.week.slots[-1].footprint == INITIAL_PLACEHOLDERS.low
        assert tracker.form == FootprintInput()
        assert tracker.snapshot().achievements.days_tracked == 2

    def test_clear_history_needs_confirmation(self, tracker):
        """Unconfirmed bulk resets change nothing."""
        _save_days(tracker, [(10, 5, "mixed")])
        before = tracker.to_state()

        result = tracker.clear_all_history(confirmed=False, today=TODAY)

        assert result.applied is False
        assert tracker.to_state() == before

    def test_clear_history(self):
        """Clear history empties ledger and achievements, keeps the target."""
        tracker = EcoTracker(generator=lambda r: r.high, today=TODAY)
        tracker.set_target(12)
        _save_days(tracker, [(10, 5, "mixed"), (0, 3, "vegetarian")])

        result = tracker.clear_all_history(confirmed=True, today=TODAY)

        assert result.applied
        assert result.message == "All history cleared! Weekly data reset."
        assert tracker.history() == []
        assert tracker.snapshot().achievements == AchievementState()
        assert tracker.personal_target == 12
        slots = tracker.week.slots
        assert len(slots) == 7
        assert all(s.footprint == CLEAR_HISTORY_PLACEHOLDERS.high for s in slots)
        assert slots[-1].slot_date == TODAY

    def test_factory_reset(self, tracker):
        """Factory reset restores the target and clears everything."""
        tracker.set_target(9)
        _save_days(tracker, [(10, 5, "mixed")])
        tracker.update_form(22, 2, "non-veg")

        result = tracker.reset(ResetLevel.FACTORY_RESET, confirmed=True, today=TODAY)

        assert result.applied
        assert tracker.personal_target == 15
        assert tracker.history() == []
        assert tracker.form == FootprintInput()
        assert tracker.snapshot().achievements.days_tracked == 0
        assert all(s.footprint == FACTORY_RESET_PLACEHOLDERS.low for s in tracker.week.slots)

    def test_factory_reset_needs_confirmation(self, tracker):
        """Unconfirmed factory reset keeps the target."""
        tracker.set_target(9)
        assert tracker.factory_reset(confirmed=False).applied is False
        assert tracker.personal_target == 9


class TestBuildReport:
    """Tests for EcoTracker.build_report."""

    def test_report_contents(self, tracker):
        """Report assembles breakdown, target status, week and history."""
        _save_days(tracker, [(0, 3, "vegetarian")])
        report = tracker.build_report(datetime(2024, 12, 28, 18, 30))

        assert report.target_achieved is True
        assert len(report.week) == 7
        assert report.week[-1].star is True
        assert report.weekly_average == pytest.approx((5 * 6 + 5.36) / 7)
        assert len(report.history) == 1
        assert [b.title for b in report.badges][0] == "Eco Champion"

    def test_target_met_exactly_counts_as_achieved(self, tracker):
        """Report status uses at-or-under the target."""
        tracker.update_form(0, 0, "mixed")
        tracker.set_target(4.7)
        assert tracker.build_report(datetime(2024, 12, 28)).target_achieved is True

    def test_history_capped_at_ten(self, tracker):
        """Only the ten newest entries are reported."""
        _save_days(tracker, [(1, 1, "mixed")] * 14)
        report = tracker.build_report(datetime(2024, 12, 28))
        assert len(report.history) == 10
        assert report.history[0].entry_date == TODAY

    def test_does_not_mutate(self, tracker):
        """Building a report leaves state unchanged."""
        _save_days(tracker, [(10, 5, "mixed")])
        before = tracker.to_state()
        tracker.build_report(datetime(2024, 12, 28))
        assert tracker.to_state() == before


class TestSerialization:
    """Tests for to_dict/from_dict."""

    def test_round_trip_preserves_state(self, tracker):
        """A restored tracker has the same state and keeps working."""
        tracker.set_target(11)
        _save_days(tracker, [(10, 5, "mixed"), (0, 3, "vegetarian")])

        data = tracker.to_dict()
        restored = EcoTracker.from_dict(data, generator=low_end)

        assert restored.to_dict() == data
        restored.save_today(TODAY)
        assert len(restored.history()) == 2

    def test_plain_value(self, tracker):
        """Serialized state uses only JSON-friendly types."""
        data = tracker.to_dict()
        assert isinstance(data["week"][0]["slot_date"], str)
        assert data["personal_target"] == 15

    def test_duplicate_dates_rejected(self, tracker):
        """Corrupted ledgers fail fast."""
        _save_days(tracker, [(10, 5, "mixed")])
        data = tracker.to_dict()
        data["history"].append(dict(data["history"][0]))

        with pytest.raises(StateInvariantViolation):
            EcoTracker.from_dict(data)

    def test_short_week_rejected(self, tracker):
        """A week without seven slots fails fast."""
        data = tracker.to_dict()
        data["week"] = data["week"][:6]

        with pytest.raises(StateInvariantViolation):
            EcoTracker.from_dict(data)

    def test_invalid_field_rejected(self, tracker):
        """Out-of-range values are rejected by validation."""
        data = tracker.to_dict()
        data["achievements"]["days_tracked"] = -1

        with pytest.raises(ValidationError):
            EcoTracker.from_dict(data)

    def test_mislabeled_week_rejected(self, tracker):
        """A week slot labeled with the wrong weekday fails fast."""
        data = tracker.to_dict()
        data["week"][-1]["day_label"] = "Mon"

        with pytest.raises(StateInvariantViolation):
            EcoTracker.from_dict(data)
