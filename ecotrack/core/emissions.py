"""Emission Model - Pure functions for footprint math.

All functions are pure: same input always produces same output, no side effects.
"""

import math

from .models import DietType, FootprintInput, FootprintBreakdown


TRANSPORT_KG_PER_KM = 0.21
ELECTRICITY_KG_PER_KWH = 0.82

DIET_KG_PER_DAY = {
    DietType.VEGETARIAN: 2.9,
    DietType.MIXED: 4.7,
    DietType.NON_VEG: 7.2,
}


def parse_amount(raw: object) -> float:
    """Parse a numeric form field.

    Anything unusable (empty, unparsable, NaN, infinite or negative) becomes 0.

    Args:
        raw: Raw field value (string, number or None)

    Returns:
        Non-negative float
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        value = float(str(raw).strip()) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value) or value < 0:
        return 0.0
    return value


def parse_diet_type(raw: object) -> DietType:
    """Parse a diet field, falling back to mixed for unknown values."""
    if isinstance(raw, DietType):
        return raw
    try:
        return DietType(str(raw).strip().lower())
    except ValueError:
        return DietType.MIXED


def build_input(distance: object = None, electricity: object = None, diet_type: object = None) -> FootprintInput:
    """Build a clamped FootprintInput from raw form values.

    Args:
        distance: Distance in km
        electricity: Electricity in kWh
        diet_type: Diet category name

    Returns:
        FootprintInput safe to pass to compute_footprint
    """
    return FootprintInput(
        distance_km=parse_amount(distance),
        electricity_kwh=parse_amount(electricity),
        diet_type=parse_diet_type(diet_type),
    )


def compute_footprint(data: FootprintInput) -> FootprintBreakdown:
    """Calculate the day's footprint breakdown.

    Uses fixed coefficients: 0.21 kg/km, 0.82 kg/kWh and a flat daily value
    per diet type.

    Args:
        data: Clamped daily inputs

    Returns:
        FootprintBreakdown in kg CO2e
    """
    transport = data.distance_km * TRANSPORT_KG_PER_KM
    electricity = data.electricity_kwh * ELECTRICITY_KG_PER_KWH
    diet = DIET_KG_PER_DAY[data.diet_type]

    return FootprintBreakdown(
        transport=transport,
        electricity=electricity,
        diet=diet,
        total=transport + electricity + diet,
    )
