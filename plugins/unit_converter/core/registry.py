"""Shared Pint registry used to audit the conversion catalog."""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable

from pint import UnitRegistry
from pint.errors import DimensionalityError, UndefinedUnitError

from .catalog import Category, FormulaRule, LinearRule, Rule, list_categories

# Display names used by the catalog mapped to Pint unit expressions.
_UNIT_SYMBOLS: dict[str, str] = {
    "Meters": "meter",
    "Feet": "foot",
    "Kilometers": "kilometer",
    "Miles": "mile",
    "Centimeters": "centimeter",
    "Inches": "inch",
    "Yards": "yard",
    "Kilograms": "kilogram",
    "Pounds": "pound",
    "Grams": "gram",
    "Ounces": "ounce",
    "Tons": "metric_ton",
    "Celsius": "degC",
    "Fahrenheit": "degF",
    "Kelvin": "kelvin",
    "Liters": "liter",
    "Gallons (US)": "gallon",
    "Gallons (UK)": "imperial_gallon",
    "Milliliters": "milliliter",
    "Fluid Ounces (US)": "fluid_ounce",
    "Cubic Meters": "meter ** 3",
    "Square Meters": "meter ** 2",
    "Square Feet": "foot ** 2",
    "Square Kilometers": "kilometer ** 2",
    "Square Miles": "mile ** 2",
    "Hectares": "hectare",
    "Acres": "acre",
    "Seconds": "second",
    "Minutes": "minute",
    "Hours": "hour",
    "Days": "day",
    "Weeks": "week",
}

# Catalog factors are rounded to ~6 significant digits.
FACTOR_REL_TOL = 1e-5
_FORMULA_SAMPLES: tuple[float, ...] = (-40.0, 0.0, 37.5, 100.0, 1000.0)


@dataclass(frozen=True, slots=True)
class AuditFinding:
    """A catalog rule that disagrees with the reference registry."""

    category_id: str
    from_unit: str
    to_unit: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "category": self.category_id,
            "from": self.from_unit,
            "to": self.to_unit,
            "message": self.message,
        }


def _build_registry() -> UnitRegistry:
    registry = UnitRegistry(autoconvert_offset_to_baseunit=True)
    return registry


@lru_cache(maxsize=1)
def get_registry() -> UnitRegistry:
    """Return a singleton :class:`~pint.UnitRegistry` instance."""

    return _build_registry()


def unit_symbol(display_name: str) -> str | None:
    """Return the Pint expression behind a catalog display name."""

    return _UNIT_SYMBOLS.get(display_name)


def reference_convert(value: float, from_unit: str, to_unit: str) -> float:
    """Convert ``value`` between two catalog display names using Pint."""

    source = _UNIT_SYMBOLS[from_unit]
    target = _UNIT_SYMBOLS[to_unit]
    registry = get_registry()
    quantity = registry.Quantity(value, source)
    return float(quantity.to(target).magnitude)


def category_dimensionality(category: Category) -> str | None:
    """Return the Pint dimensionality shared by the category's units."""

    if not category.rules:
        return None
    symbol = _UNIT_SYMBOLS.get(category.rules[0].from_unit)
    if symbol is None:
        return None
    return str(get_registry().Unit(symbol).dimensionality)


def _audit_rule(category_id: str, rule: Rule) -> AuditFinding | None:
    try:
        return _compare_rule(category_id, rule)
    except (UndefinedUnitError, DimensionalityError) as exc:
        return AuditFinding(category_id, rule.from_unit, rule.to_unit, f"reference conversion failed: {exc}")


def _compare_rule(category_id: str, rule: Rule) -> AuditFinding | None:
    if rule.from_unit not in _UNIT_SYMBOLS or rule.to_unit not in _UNIT_SYMBOLS:
        return AuditFinding(category_id, rule.from_unit, rule.to_unit, "unit has no reference symbol")
    if isinstance(rule, LinearRule):
        expected = reference_convert(1.0, rule.from_unit, rule.to_unit)
        if not math.isclose(rule.factor, expected, rel_tol=FACTOR_REL_TOL):
            return AuditFinding(
                category_id,
                rule.from_unit,
                rule.to_unit,
                f"factor {rule.factor!r} differs from reference {expected!r}",
            )
        return None
    if isinstance(rule, FormulaRule):
        for sample in _FORMULA_SAMPLES:
            expected = reference_convert(sample, rule.from_unit, rule.to_unit)
            actual = rule.formula(sample)
            if not math.isclose(actual, expected, rel_tol=1e-9, abs_tol=1e-9):
                return AuditFinding(
                    category_id,
                    rule.from_unit,
                    rule.to_unit,
                    f"formula({sample}) = {actual!r}, reference {expected!r}",
                )
        return None
    return AuditFinding(category_id, rule.from_unit, rule.to_unit, "rule has no factor or formula")


def audit_catalog(categories: Iterable[Category] | None = None) -> list[AuditFinding]:
    """Compare every catalog rule against the Pint reference conversions."""

    findings: list[AuditFinding] = []
    for category in categories if categories is not None else list_categories():
        for rule in category.rules:
            finding = _audit_rule(category.id, rule)
            if finding is not None:
                findings.append(finding)
    return findings


__all__ = [
    "AuditFinding",
    "FACTOR_REL_TOL",
    "audit_catalog",
    "category_dimensionality",
    "get_registry",
    "reference_convert",
    "unit_symbol",
]
