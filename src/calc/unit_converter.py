"""Unit conversion for length, mass, temperature, area, volume and time.

Linear categories convert through a ratio table whose base unit has ratio 1:
``value * factor(from) / factor(to)``. Temperature pivots through Celsius.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from calc.errors import ValidationError


class UnitCategory(str, Enum):
    LENGTH = 'length'
    MASS = 'mass'
    TEMPERATURE = 'temperature'
    AREA = 'area'
    VOLUME = 'volume'
    TIME = 'time'


# Ratios relative to the base unit of each category (m, kg, m2, l, s)
UNIT_TABLES: Dict[UnitCategory, Dict[str, float]] = {
    UnitCategory.LENGTH: {
        'm': 1,
        'km': 1000,
        'cm': 0.01,
        'mm': 0.001,
        'mile': 1609.34,
        'yard': 0.9144,
        'foot': 0.3048,
        'inch': 0.0254,
    },
    UnitCategory.MASS: {
        'kg': 1,
        'g': 0.001,
        'mg': 0.000001,
        'lb': 0.453592,
        'oz': 0.0283495,
    },
    UnitCategory.AREA: {
        'm2': 1,
        'km2': 1000000,
        'cm2': 0.0001,
        'mm2': 0.000001,
        'hectare': 10000,
        'acre': 4046.86,
    },
    UnitCategory.VOLUME: {
        'l': 1,
        'ml': 0.001,
        'm3': 1000,
        'cm3': 0.001,
        'gallon': 3.78541,
    },
    UnitCategory.TIME: {
        's': 1,
        'min': 60,
        'hour': 3600,
        'day': 86400,
        'week': 604800,
        'month': 2592000,
        'year': 31536000,
    },
}

TEMPERATURE_UNITS = {
    'C': 'celsius',
    'F': 'fahrenheit',
    'K': 'kelvin',
}


@dataclass
class UnitConversionRequest:
    category: UnitCategory
    from_unit: str
    to_unit: str
    value: float


def parse_category(category: Any) -> UnitCategory:
    if isinstance(category, UnitCategory):
        return category
    try:
        return UnitCategory(str(category).lower())
    except ValueError:
        names = ', '.join(c.value for c in UnitCategory)
        raise ValidationError(f"Unknown unit category '{category}'. Choose from: {names}")


def units_for(category: Any) -> List[str]:
    """Unit names available in a category, in table order."""
    cat = parse_category(category)
    if cat == UnitCategory.TEMPERATURE:
        return list(TEMPERATURE_UNITS)
    return list(UNIT_TABLES[cat])


def find_category(unit: str) -> Optional[UnitCategory]:
    """Category containing ``unit``, or None."""
    if unit in TEMPERATURE_UNITS:
        return UnitCategory.TEMPERATURE
    for category, table in UNIT_TABLES.items():
        if unit in table:
            return category
    return None


def _to_celsius(value: float, unit: str) -> float:
    if unit == 'C':
        return value
    if unit == 'F':
        return (value - 32) * 5 / 9
    return value - 273.15


def _from_celsius(celsius: float, unit: str) -> float:
    if unit == 'C':
        return celsius
    if unit == 'F':
        return celsius * 9 / 5 + 32
    return celsius + 273.15


def _numeric(value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError("Value must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid number: {value!r}")
    if not math.isfinite(number):
        raise ValidationError("Value must be a finite number")
    return number


def validate_request(request: UnitConversionRequest) -> None:
    """Check that both units belong to the request's category."""
    available = units_for(request.category)
    for unit in (request.from_unit, request.to_unit):
        if unit not in available:
            raise ValidationError(
                f"Unit '{unit}' is not a {request.category.value} unit. Choose from: {', '.join(available)}"
            )


def convert(value: Any, from_unit: str, to_unit: str, category: Any) -> float:
    """Convert ``value`` between two units of the same category.

    Args:
        value: Number (or numeric text) to convert
        from_unit: Source unit, e.g. ``'m'``
        to_unit: Target unit, e.g. ``'foot'``
        category: A ``UnitCategory`` or its name

    Returns:
        The converted value

    Raises:
        ValidationError: Non-numeric value, unknown category or unit
    """
    request = UnitConversionRequest(parse_category(category), from_unit, to_unit, _numeric(value))
    validate_request(request)

    if request.category == UnitCategory.TEMPERATURE:
        return _from_celsius(_to_celsius(request.value, from_unit), to_unit)

    table = UNIT_TABLES[request.category]
    return request.value * table[from_unit] / table[to_unit]
