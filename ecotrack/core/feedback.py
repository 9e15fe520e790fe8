"""Feedback - Pure functions for badges, tips and target progress.

All functions are pure: same input always produces same output, no side effects.
"""

from .models import Badge, DietType, FootprintBand, FootprintBreakdown, FootprintInput


MAX_TIPS = 3

ECO_CHAMPION = Badge(emoji="🌟", title="Eco Champion", description="Under 8kg CO₂!")
GREEN_WARRIOR = Badge(emoji="🌱", title="Green Warrior", description="Under 12kg CO₂!")
TARGET_ACHIEVED = Badge(emoji="🎯", title="Target Achieved", description="Met personal goal!")
CAR_FREE_DAY = Badge(emoji="🚶‍♂️", title="Car-Free Day", description="Zero transport emissions!")
PLANT_POWERED = Badge(emoji="🥗", title="Plant Powered", description="Vegetarian choice!")
ENERGY_SAVER = Badge(emoji="💡", title="Energy Saver", description="Low electricity use!")

TIER_BADGES = (ECO_CHAMPION, GREEN_WARRIOR, TARGET_ACHIEVED)

TIP_LONG_TRIPS = "🚲 Consider carpooling or public transport for long trips"
TIP_SHORT_TRIPS = "🚶‍♂️ Try walking or biking for shorter distances"
TIP_UNPLUG = "💡 Unplug devices when not in use to save energy"
TIP_THERMOSTAT = "🌡️ Adjust thermostat by 2°C to reduce energy consumption"
TIP_MEATLESS = "🥗 Try 'Meatless Monday' to reduce your food footprint"
TIP_LOCAL_PRODUCE = "🌱 Choose local and seasonal produce when possible"
TIP_LOW_FOOTPRINT = "🌟 Excellent! You're maintaining a low carbon footprint"
TIP_BELOW_SUSTAINABLE = "🏆 You're below the daily sustainable target!"


def _tier_badge(total: float, target: float) -> Badge | None:
    if total < 8:
        return ECO_CHAMPION
    if total < 12:
        return GREEN_WARRIOR
    if total < target:
        return TARGET_ACHIEVED
    return None


def evaluate_badges(data: FootprintInput, breakdown: FootprintBreakdown, target: float) -> list[Badge]:
    """Evaluate the badges earned by a single day.

    At most one tier badge fires (first match wins), followed by any
    situational badges.

    Args:
        data: Clamped daily inputs
        breakdown: Footprint computed from data
        target: Personal daily target in kg CO2e

    Returns:
        Ordered list of badges
    """
    badges = []

    tier = _tier_badge(breakdown.total, target)
    if tier is not None:
        badges.append(tier)

    if data.distance_km == 0:
        badges.append(CAR_FREE_DAY)
    if data.diet_type == DietType.VEGETARIAN:
        badges.append(PLANT_POWERED)
    if data.electricity_kwh < 5:
        badges.append(ENERGY_SAVER)

    return badges


def evaluate_tips(data: FootprintInput, breakdown: FootprintBreakdown) -> list[str]:
    """Suggest up to three actions for the day.

    Order is distance, electricity, diet, low-footprint fallback, then the
    sustainable-target bonus; the list is cut to MAX_TIPS.

    Args:
        data: Clamped daily inputs
        breakdown: Footprint computed from data

    Returns:
        List of at most MAX_TIPS tips
    """
    tips = []

    if data.distance_km > 30:
        tips.append(TIP_LONG_TRIPS)
    elif data.distance_km > 15:
        tips.append(TIP_SHORT_TRIPS)

    if data.electricity_kwh > 15:
        tips.append(TIP_UNPLUG)
    elif data.electricity_kwh > 8:
        tips.append(TIP_THERMOSTAT)

    if data.diet_type == DietType.NON_VEG:
        tips.append(TIP_MEATLESS)
    elif data.diet_type == DietType.MIXED:
        tips.append(TIP_LOCAL_PRODUCE)

    if not tips:
        tips.append(TIP_LOW_FOOTPRINT)

    if breakdown.total < 10:
        tips.append(TIP_BELOW_SUSTAINABLE)

    return tips[:MAX_TIPS]


def classify_footprint(footprint: float, target: float) -> FootprintBand:
    """Place a footprint in the green/yellow/red band for a target."""
    if footprint < target * 0.6:
        return FootprintBand.LOW
    if footprint < target:
        return FootprintBand.MODERATE
    return FootprintBand.HIGH


def target_progress_pct(footprint: float, target: float) -> float:
    """Share of the target used by a footprint, capped at 100."""
    if target <= 0:
        return 100.0
    return min(footprint / target * 100, 100.0)


def is_star_day(footprint: float, target: float) -> bool:
    """Days at or under 80% of the target get a star in reports."""
    return footprint <= target * 0.8
