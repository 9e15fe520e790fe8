"""Weekly Window - Fixed 7-slot view of the trailing week.

The window is a snapshot: it does not advance on its own. Callers re-create
it (or reset it) when the day rolls over.
"""

import logging
import random
from datetime import date, timedelta
from typing import Callable, Iterable

from .errors import StateInvariantViolation
from .models import INITIAL_PLACEHOLDERS, PlaceholderRange, WeekSlot


logger = logging.getLogger(__name__)

WINDOW_DAYS = 7
DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

PlaceholderGenerator = Callable[[PlaceholderRange], float]


def random_placeholder(placeholder_range: PlaceholderRange) -> float:
    """Draw a placeholder footprint from a range.

    Integral ranges yield whole kilograms (both ends inclusive).
    """
    if placeholder_range.integral:
        return float(random.randint(int(placeholder_range.low), int(placeholder_range.high)))
    return random.uniform(placeholder_range.low, placeholder_range.high)


def day_label(day: date) -> str:
    """Short weekday name, independent of locale."""
    return DAY_LABELS[day.weekday()]


def trailing_week(today: date) -> list[date]:
    """The 7 dates ending today, oldest first."""
    return [today - timedelta(days=WINDOW_DAYS - 1 - i) for i in range(WINDOW_DAYS)]


def _fresh_slots(
    today: date, placeholder_range: PlaceholderRange, generator: PlaceholderGenerator
) -> list[WeekSlot]:
    return [
        WeekSlot(day_label=day_label(d), slot_date=d, footprint=generator(placeholder_range))
        for d in trailing_week(today)
    ]


class WeeklyWindow:
    """Seven consecutive days ending on the day of the last initialize/reset."""

    def __init__(self, slots: Iterable[WeekSlot]) -> None:
        """Initialize from existing slots.

        Args:
            slots: Exactly seven slots on consecutive dates, oldest first, each
                labeled with its weekday

        Raises:
            StateInvariantViolation: If the slots do not form a trailing week
        """
        slots = list(slots)
        if len(slots) != WINDOW_DAYS:
            raise StateInvariantViolation(
                f"Weekly window must have {WINDOW_DAYS} slots, got {len(slots)}"
            )
        expected = trailing_week(slots[-1].slot_date)
        if [s.slot_date for s in slots] != expected:
            raise StateInvariantViolation("Weekly window slots must be consecutive days, oldest first")
        mislabeled = [s for s in slots if s.day_label != day_label(s.slot_date)]
        if mislabeled:
            raise StateInvariantViolation(
                f"Weekly slot for {mislabeled[0].slot_date} is labeled {mislabeled[0].day_label!r}"
            )
        self._slots: list[WeekSlot] = slots

    @classmethod
    def initialize(
        cls,
        today: date | None = None,
        generator: PlaceholderGenerator = random_placeholder,
    ) -> "WeeklyWindow":
        """Create a window for the week ending today with placeholder values.

        Args:
            today: Last day of the window (defaults to today)
            generator: Placeholder source, drawn over the initial 5-15 kg range

        Returns:
            New WeeklyWindow
        """
        if today is None:
            today = date.today()
        return cls(_fresh_slots(today, INITIAL_PLACEHOLDERS, generator))

    @property
    def slots(self) -> list[WeekSlot]:
        """Copy of the slots, oldest first."""
        return list(self._slots)

    @property
    def end_date(self) -> date:
        return self._slots[-1].slot_date

    def is_current(self, today: date | None = None) -> bool:
        """Whether the window still ends on today."""
        return self.end_date == (today or date.today())

    def record_today(self, footprint: float, today: date | None = None) -> bool:
        """Overwrite today's slot.

        Args:
            footprint: Value to store
            today: Current date (defaults to today)

        Returns:
            True if a slot was updated, False if the window is stale
        """
        if today is None:
            today = date.today()

        for i, slot in enumerate(self._slots):
            if slot.slot_date == today:
                updated = list(self._slots)
                updated[i] = slot.model_copy(update={"footprint": footprint})
                self._slots = updated
                return True

        logger.warning("Weekly window ending %s does not contain %s", self.end_date, today)
        return False

    def reset_with_fresh_placeholders(
        self,
        placeholder_range: PlaceholderRange,
        today: date | None = None,
        generator: PlaceholderGenerator = random_placeholder,
    ) -> None:
        """Regenerate all seven slots for the week ending today.

        Args:
            placeholder_range: Range to draw placeholders from
            today: Last day of the regenerated window (defaults to today)
            generator: Placeholder source
        """
        if today is None:
            today = date.today()
        self._slots = _fresh_slots(today, placeholder_range, generator)

    def average(self) -> float:
        return sum(s.footprint for s in self._slots) / len(self._slots)

    def maximum(self) -> float:
        return max(s.footprint for s in self._slots)
