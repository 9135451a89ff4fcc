"""Static catalog of conversion categories and directed unit rules."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Optional, Union

CUSTOM_CATEGORY_ID = "custom"


@dataclass(frozen=True, slots=True)
class LinearRule:
    """Directed pair converted by a constant scale factor."""

    from_unit: str
    to_unit: str
    factor: float
    # Only the rule synthesized for the custom category may carry a zero factor.
    allow_zero: bool = False

    def __post_init__(self) -> None:
        _check_names(self.from_unit, self.to_unit)
        if not math.isfinite(self.factor):
            raise ValueError("Conversion factor must be finite.")
        if self.factor == 0 and not self.allow_zero:
            raise ValueError("Conversion factor must be non-zero.")

    @property
    def kind(self) -> str:
        return "linear"


@dataclass(frozen=True, slots=True)
class FormulaRule:
    """Directed pair converted by a non-linear formula (e.g. temperature)."""

    from_unit: str
    to_unit: str
    formula: Callable[[float], float]

    def __post_init__(self) -> None:
        _check_names(self.from_unit, self.to_unit)
        if not callable(self.formula):
            raise ValueError("Conversion formula must be callable.")

    @property
    def kind(self) -> str:
        return "formula"


Rule = Union[LinearRule, FormulaRule]


@dataclass(frozen=True, slots=True)
class Category:
    """Named group of rules sharing a physical quantity."""

    id: str
    label: str
    icon: str
    rules: tuple[Rule, ...] = ()

    @property
    def is_custom(self) -> bool:
        return self.id == CUSTOM_CATEGORY_ID


def _check_names(from_unit: str, to_unit: str) -> None:
    if not from_unit or not to_unit:
        raise ValueError("Unit names must be non-empty strings.")


def _pair(from_unit: str, to_unit: str, factor: float) -> tuple[LinearRule, LinearRule]:
    """Return both directions of a linear relationship."""

    return LinearRule(from_unit, to_unit, factor), LinearRule(to_unit, from_unit, 1 / factor)


def _celsius_to_fahrenheit(value: float) -> float:
    return value * 9 / 5 + 32


def _fahrenheit_to_celsius(value: float) -> float:
    return (value - 32) * 5 / 9


def _celsius_to_kelvin(value: float) -> float:
    return value + 273.15


def _kelvin_to_celsius(value: float) -> float:
    return value - 273.15


def _kelvin_to_fahrenheit(value: float) -> float:
    return (value - 273.15) * 9 / 5 + 32


def _fahrenheit_to_kelvin(value: float) -> float:
    return (value - 32) * 5 / 9 + 273.15


CATALOG: tuple[Category, ...] = (
    Category(
        "length",
        "Length",
        "tape-measure",
        (
            *_pair("Meters", "Feet", 3.28084),
            *_pair("Kilometers", "Miles", 0.621371),
            *_pair("Centimeters", "Inches", 0.393701),
            LinearRule("Yards", "Meters", 0.9144),
            LinearRule("Meters", "Yards", 1 / 0.9144),
        ),
    ),
    Category(
        "mass",
        "Mass",
        "weight-kilogram",
        (
            *_pair("Kilograms", "Pounds", 2.20462),
            *_pair("Grams", "Ounces", 0.035274),
            *_pair("Pounds", "Ounces", 16),
            LinearRule("Tons", "Kilograms", 1000),
            LinearRule("Kilograms", "Tons", 1 / 1000),
        ),
    ),
    Category(
        "temperature",
        "Temperature",
        "thermometer",
        (
            FormulaRule("Celsius", "Fahrenheit", _celsius_to_fahrenheit),
            FormulaRule("Fahrenheit", "Celsius", _fahrenheit_to_celsius),
            FormulaRule("Celsius", "Kelvin", _celsius_to_kelvin),
            FormulaRule("Kelvin", "Celsius", _kelvin_to_celsius),
            FormulaRule("Kelvin", "Fahrenheit", _kelvin_to_fahrenheit),
            FormulaRule("Fahrenheit", "Kelvin", _fahrenheit_to_kelvin),
        ),
    ),
    Category(
        "volume",
        "Volume",
        "bottle-wine",
        (
            *_pair("Liters", "Gallons (US)", 0.264172),
            *_pair("Milliliters", "Fluid Ounces (US)", 0.033814),
            LinearRule("Liters", "Cubic Meters", 0.001),
            LinearRule("Cubic Meters", "Liters", 1000),
            *_pair("Gallons (US)", "Gallons (UK)", 0.832674),
        ),
    ),
    Category(
        "area",
        "Area",
        "square-outline",
        (
            *_pair("Square Meters", "Square Feet", 10.7639),
            *_pair("Square Kilometers", "Square Miles", 0.386102),
            *_pair("Hectares", "Acres", 2.47105),
        ),
    ),
    Category(
        "time",
        "Time",
        "clock-outline",
        (
            LinearRule("Seconds", "Minutes", 1 / 60),
            LinearRule("Minutes", "Seconds", 60),
            LinearRule("Minutes", "Hours", 1 / 60),
            LinearRule("Hours", "Minutes", 60),
            LinearRule("Hours", "Days", 1 / 24),
            LinearRule("Days", "Hours", 24),
            LinearRule("Days", "Weeks", 1 / 7),
            LinearRule("Weeks", "Days", 7),
        ),
    ),
    Category(CUSTOM_CATEGORY_ID, "Custom", "form-select"),
)

_BY_ID: dict[str, Category] = {category.id: category for category in CATALOG}


def list_categories() -> tuple[Category, ...]:
    """Return all categories in display order."""

    return CATALOG


def lookup(category_id: str) -> Optional[Category]:
    """Return the category registered under ``category_id`` or ``None``."""

    return _BY_ID.get(category_id)


def rule_at(category: Optional[Category], index: int) -> Optional[Rule]:
    """Return the rule at ``index`` within ``category`` or ``None``."""

    if category is None or index < 0 or index >= len(category.rules):
        return None
    return category.rules[index]


__all__ = [
    "CATALOG",
    "CUSTOM_CATEGORY_ID",
    "Category",
    "FormulaRule",
    "LinearRule",
    "Rule",
    "list_categories",
    "lookup",
    "rule_at",
]
