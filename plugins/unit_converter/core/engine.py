"""Rule resolution, conversion and view computation for the converter screen."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional, Union

from common.logging import get_logger

from .catalog import (
    CUSTOM_CATEGORY_ID,
    FormulaRule,
    LinearRule,
    Rule,
    lookup,
    rule_at,
)
from .formatting import format_result, parse_factor, parse_number

logger = get_logger("quickconvert.engine")

ERROR_TEXT = "Error"
ZERO_FACTOR_TEXT = "Factor must be non-zero"
MALFORMED_RULE_TEXT = "Error: No formula/factor"
DEFAULT_CUSTOM_FROM = "Unit A"
DEFAULT_CUSTOM_TO = "Unit B"

STATUS_VALUE = "value"
STATUS_EMPTY = "empty"
STATUS_ERROR = "error"


class ConversionError(Exception):
    """Base exception for conversion failures."""


class NonFiniteValueError(ConversionError):
    """Raised when the input or the converted value is not finite."""


class ZeroFactorError(ConversionError):
    """Raised when a custom conversion is attempted with a zero factor."""


class MalformedRuleError(ConversionError):
    """Raised when a rule carries neither a factor nor a formula."""


class UnknownCategoryError(ConversionError):
    """Raised when a category id is not part of the catalog."""


class UnknownRuleError(ConversionError):
    """Raised when a rule index does not exist in the active category."""


class SwapRejectedError(ConversionError):
    """Raised when the active conversion cannot be reversed."""

    def __init__(self, title: str, message: str) -> None:
        super().__init__(message)
        self.title = title
        self.message = message


@dataclass(frozen=True, slots=True)
class CatalogSelection:
    """Cursor over a static catalog category."""

    category_id: str = "length"
    rule_index: int = 0
    swapped: bool = False

    @property
    def is_custom(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class CustomSelection:
    """User-defined linear pair; empty names fall back to placeholders."""

    from_unit: str = ""
    to_unit: str = ""
    factor_text: str = ""
    swapped: bool = False

    @property
    def is_custom(self) -> bool:
        return True

    @property
    def from_label(self) -> str:
        return self.from_unit or DEFAULT_CUSTOM_FROM

    @property
    def to_label(self) -> str:
        return self.to_unit or DEFAULT_CUSTOM_TO

    @property
    def factor(self) -> float:
        return parse_factor(self.factor_text)


Selection = Union[CatalogSelection, CustomSelection]


@dataclass(frozen=True, slots=True)
class ConversionResult:
    status: str
    text: str = ""
    value: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_VALUE


_EMPTY = ConversionResult(STATUS_EMPTY)


@dataclass(frozen=True, slots=True)
class HistoryRecord:
    """History fields produced by a successful conversion, not yet stored."""

    input_value: str
    input_unit: str
    result_value: str
    output_unit: str
    category_label: str


@dataclass(frozen=True, slots=True)
class DisplayModel:
    """Everything the presentation layer needs to render the screen."""

    selection: Selection
    raw_input: str
    result: ConversionResult
    input_unit: str
    output_unit: str
    swap_disabled: bool
    category_id: str
    category_label: str
    record: Optional[HistoryRecord] = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "category": self.category_id,
            "category_label": self.category_label,
            "input": self.raw_input,
            "result": self.result.text,
            "status": self.result.status,
            "input_unit": self.input_unit,
            "output_unit": self.output_unit,
            "swapped": self.selection.swapped,
            "swap_disabled": self.swap_disabled,
        }
        if isinstance(self.selection, CatalogSelection):
            payload["rule_index"] = self.selection.rule_index
        else:
            payload["custom"] = {
                "from_unit": self.selection.from_unit,
                "to_unit": self.selection.to_unit,
                "factor": self.selection.factor_text,
            }
        return payload


def resolve_active_rule(selection: Selection) -> Optional[Rule]:
    """Return the rule the selection points at, or ``None``."""

    if isinstance(selection, CustomSelection):
        return LinearRule(
            selection.from_label,
            selection.to_label,
            selection.factor,
            allow_zero=True,
        )
    return rule_at(lookup(selection.category_id), selection.rule_index)


def resolve_display_units(rule: Optional[Rule], selection: Selection) -> tuple[str, str]:
    """Return ``(input_unit, output_unit)`` as shown on screen."""

    if isinstance(selection, CustomSelection):
        if selection.swapped:
            return selection.to_label, selection.from_label
        return selection.from_label, selection.to_label
    if rule is None:
        return "", ""
    if isinstance(rule, FormulaRule):
        return rule.from_unit, rule.to_unit
    if selection.swapped:
        return rule.to_unit, rule.from_unit
    return rule.from_unit, rule.to_unit


def category_label(selection: Selection) -> str:
    if isinstance(selection, CustomSelection):
        return f"Custom: {selection.from_label} ↔ {selection.to_label}"
    category = lookup(selection.category_id)
    return category.label if category is not None else ""


def _apply_rule(value: float, rule: Rule, swapped: bool) -> float:
    if isinstance(rule, FormulaRule):
        return float(rule.formula(value))
    if isinstance(rule, LinearRule):
        if rule.factor == 0:
            raise ZeroFactorError(ZERO_FACTOR_TEXT)
        if swapped:
            return value / rule.factor
        return value * rule.factor
    raise MalformedRuleError(MALFORMED_RULE_TEXT)


def convert(raw_input: str, rule: Optional[Rule], selection: Selection) -> ConversionResult:
    """Convert ``raw_input`` with ``rule``; never raises."""

    if rule is None:
        return _EMPTY
    text = (raw_input or "").strip()
    if text in ("", "-"):
        return _EMPTY
    number = parse_number(text)
    if number is None or math.isnan(number):
        return _EMPTY
    try:
        if not math.isfinite(number):
            raise NonFiniteValueError(ERROR_TEXT)
        converted = _apply_rule(number, rule, selection.swapped)
        if not math.isfinite(converted):
            raise NonFiniteValueError(ERROR_TEXT)
        formatted = format_result(converted)
    except ZeroFactorError:
        return ConversionResult(STATUS_ERROR, ZERO_FACTOR_TEXT)
    except MalformedRuleError:
        logger.warning("rule %r has neither factor nor formula", rule)
        return ConversionResult(STATUS_ERROR, MALFORMED_RULE_TEXT)
    except NonFiniteValueError:
        return ConversionResult(STATUS_ERROR, ERROR_TEXT)
    except Exception:  # pragma: no cover - formulas are plain arithmetic
        logger.exception("conversion of %r failed", text)
        return ConversionResult(STATUS_ERROR, ERROR_TEXT)
    return ConversionResult(STATUS_VALUE, formatted, converted)


def check_swap(selection: Selection) -> None:
    """Raise :class:`SwapRejectedError` when the direction cannot be flipped."""

    rule = resolve_active_rule(selection)
    if rule is None:
        raise SwapRejectedError("No Conversion", "There is no active conversion to swap.")
    if isinstance(rule, FormulaRule):
        raise SwapRejectedError(
            "Non-Linear Unit",
            "Cannot swap non-linear units; select the reverse conversion instead.",
        )
    if isinstance(selection, CustomSelection) and selection.factor == 0:
        raise SwapRejectedError("Invalid Factor", "Cannot swap if the custom factor is 0.")


def is_swap_disabled(selection: Selection) -> bool:
    try:
        check_swap(selection)
    except SwapRejectedError:
        return True
    return False


def swap(selection: Selection, result_text: str) -> tuple[Selection, str]:
    """Flip the direction; the previous result becomes the new raw input."""

    check_swap(selection)
    return replace(selection, swapped=not selection.swapped), result_text


def compute_view(selection: Selection, raw_input: str) -> DisplayModel:
    """Pure recomputation of the screen for ``selection`` and ``raw_input``."""

    rule = resolve_active_rule(selection)
    input_unit, output_unit = resolve_display_units(rule, selection)
    result = convert(raw_input, rule, selection)
    label = category_label(selection)
    record = None
    if result.ok:
        record = HistoryRecord(
            input_value=raw_input.strip(),
            input_unit=input_unit,
            result_value=result.text,
            output_unit=output_unit,
            category_label=label,
        )
    category_id = (
        CUSTOM_CATEGORY_ID if isinstance(selection, CustomSelection) else selection.category_id
    )
    return DisplayModel(
        selection=selection,
        raw_input=raw_input,
        result=result,
        input_unit=input_unit,
        output_unit=output_unit,
        swap_disabled=is_swap_disabled(selection),
        category_id=category_id,
        category_label=label,
        record=record,
    )


__all__ = [
    "CatalogSelection",
    "ConversionError",
    "ConversionResult",
    "CustomSelection",
    "DisplayModel",
    "ERROR_TEXT",
    "HistoryRecord",
    "MALFORMED_RULE_TEXT",
    "MalformedRuleError",
    "NonFiniteValueError",
    "Selection",
    "SwapRejectedError",
    "UnknownCategoryError",
    "UnknownRuleError",
    "ZERO_FACTOR_TEXT",
    "ZeroFactorError",
    "category_label",
    "check_swap",
    "compute_view",
    "convert",
    "is_swap_disabled",
    "resolve_active_rule",
    "resolve_display_units",
    "swap",
]
