"""Core Data Models - Pydantic models for type safety.

Value models (inputs, breakdowns, entries, slots, counters, badges) are frozen.
Stateful components (ledger, weekly window, accumulator) hold them and replace
them rather than editing fields in place. Containers built from them (state,
snapshot, report) hold fresh lists, so nothing handed out aliases engine state.
"""

from datetime import datetime
from datetime import date as DateType
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


DEFAULT_TARGET = 15.0


class DietType(str, Enum):
    """Diet category for the day."""

    VEGETARIAN = "vegetarian"
    MIXED = "mixed"
    NON_VEG = "non-veg"


class FootprintBand(str, Enum):
    """Color band of a footprint relative to the personal target."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class ResetLevel(str, Enum):
    """Reset levels, from least to most destructive."""

    CLEAR_FORM = "clear_form"
    RESET_TODAY = "reset_today"
    CLEAR_HISTORY = "clear_history"
    FACTORY_RESET = "factory_reset"


class FootprintInput(BaseModel):
    """The day's raw inputs, already clamped at the boundary."""

    model_config = ConfigDict(frozen=True)

    distance_km: float = Field(default=0.0, ge=0, description="Distance travelled by car in km")
    electricity_kwh: float = Field(default=0.0, ge=0, description="Electricity used in kWh")
    diet_type: DietType = Field(default=DietType.MIXED)


class FootprintBreakdown(BaseModel):
    """Emissions per category in kg CO2e."""

    model_config = ConfigDict(frozen=True)

    transport: float = Field(ge=0)
    electricity: float = Field(ge=0)
    diet: float = Field(ge=0)
    total: float = Field(ge=0, description="transport + electricity + diet")


class HistoryEntry(BaseModel):
    """A saved day. The date is the ledger key."""

    model_config = ConfigDict(frozen=True)

    entry_date: DateType
    footprint: float = Field(ge=0)
    distance_km: float = Field(ge=0)
    electricity_kwh: float = Field(ge=0)
    diet_type: DietType


class WeekSlot(BaseModel):
    """One day of the weekly window."""

    model_config = ConfigDict(frozen=True)

    day_label: str = Field(description="Short weekday name, e.g. Mon")
    slot_date: DateType
    footprint: float = Field(ge=0)


class AchievementState(BaseModel):
    """Counters accumulated by save events."""

    model_config = ConfigDict(frozen=True)

    days_tracked: int = Field(default=0, ge=0)
    total_reduction_pct: float = Field(
        default=0.0, ge=0, description="Running reduction score against 20 kg, floored at 0"
    )
    green_days_count: int = Field(default=0, ge=0, description="Saves with total under 10 kg")


class PlaceholderRange(BaseModel):
    """Range for synthetic weekly placeholder values."""

    model_config = ConfigDict(frozen=True)

    low: float = Field(ge=0)
    high: float = Field(ge=0)
    integral: bool = Field(default=False, description="Draw whole kilograms only")


INITIAL_PLACEHOLDERS = PlaceholderRange(low=5, high=15)
CLEAR_HISTORY_PLACEHOLDERS = PlaceholderRange(low=3, high=17, integral=True)
FACTORY_RESET_PLACEHOLDERS = PlaceholderRange(low=2, high=21, integral=True)


class Badge(BaseModel):
    """Positive feedback signal for a single day."""

    model_config = ConfigDict(frozen=True)

    emoji: str
    title: str
    description: str


class TrackerState(BaseModel):
    """Full serializable state of one tracking session."""

    form: FootprintInput = Field(default_factory=FootprintInput)
    personal_target: float = Field(default=DEFAULT_TARGET, gt=0)
    history: list[HistoryEntry] = Field(default_factory=list)
    week: list[WeekSlot] = Field(default_factory=list)
    achievements: AchievementState = Field(default_factory=AchievementState)


class SaveResult(BaseModel):
    """Outcome of saving today's data."""

    entry: HistoryEntry
    week_updated: bool = Field(description="False when the weekly window does not contain today")
    message: str


class ResetResult(BaseModel):
    """Outcome of a reset request."""

    level: ResetLevel
    applied: bool
    message: str


class TrackerSnapshot(BaseModel):
    """Read-only dashboard view of a session."""

    form: FootprintInput
    breakdown: FootprintBreakdown
    personal_target: float
    band: FootprintBand
    progress_pct: float = Field(description="Share of target used, capped at 100")
    target_gap: float = Field(description="target - total. Negative = over target.")
    badges: list[Badge]
    tips: list[str]
    recent_history: list[HistoryEntry]
    week: list[WeekSlot]
    weekly_average: float
    weekly_max: float
    achievements: AchievementState


class ReportDay(BaseModel):
    """Weekly window line in an exported report."""

    model_config = ConfigDict(frozen=True)

    day_label: str
    slot_date: DateType
    footprint: float
    star: bool = Field(description="At or under 80% of the personal target")


class FootprintReport(BaseModel):
    """Formatting-ready export data."""

    generated_at: datetime
    form: FootprintInput
    breakdown: FootprintBreakdown
    personal_target: float
    target_achieved: bool
    week: list[ReportDay]
    weekly_average: float
    achievements: AchievementState
    badges: list[Badge]
    tips: list[str]
    history: list[HistoryEntry] = Field(description="Up to 10 most recent entries")


class ExportResult(BaseModel):
    """Outcome of an export request, reported after the sink finishes."""

    sink: str
    success: bool
    message: str
    filename: str | None = None
