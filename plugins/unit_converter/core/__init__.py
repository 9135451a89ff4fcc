"""Facade for the unit converter core utilities."""

from __future__ import annotations

from typing import Dict, List, Optional

from .catalog import (
    CUSTOM_CATEGORY_ID,
    Category,
    FormulaRule,
    LinearRule,
    lookup,
    list_categories,
    rule_at,
)
from .engine import (
    CatalogSelection,
    ConversionError,
    CustomSelection,
    Selection,
    SwapRejectedError,
    UnknownCategoryError,
    UnknownRuleError,
    compute_view,
)
from .formatting import format_result, parse_number
from .history import HistoryEntryNotFoundError
from .registry import audit_catalog, category_dimensionality
from .session import (
    ConverterSession,
    SessionLimitError,
    SessionNotFoundError,
    configure_session_store,
    delete_session,
    get_session,
    new_session,
    reset_session_store,
)


def _describe_category(category: Category) -> Dict[str, object]:
    rules: List[Dict[str, object]] = []
    for index, rule in enumerate(category.rules):
        entry: Dict[str, object] = {
            "index": index,
            "from": rule.from_unit,
            "to": rule.to_unit,
            "kind": rule.kind,
        }
        if isinstance(rule, LinearRule):
            entry["factor"] = rule.factor
        rules.append(entry)
    return {
        "id": category.id,
        "label": category.label,
        "icon": category.icon,
        "dimensionality": category_dimensionality(category),
        "rules": rules,
    }


def list_catalog() -> List[Dict[str, object]]:
    """Return the catalog in display order with rule metadata."""

    return [_describe_category(category) for category in list_categories()]


def build_selection(
    category_id: str,
    *,
    rule_index: int = 0,
    swapped: bool = False,
    custom_from: str = "",
    custom_to: str = "",
    custom_factor: str = "",
) -> Selection:
    """Validate a selection request and return the matching variant."""

    category = lookup(category_id)
    if category is None:
        raise UnknownCategoryError(f"Unknown category '{category_id}'.")
    if category.id == CUSTOM_CATEGORY_ID:
        return CustomSelection(custom_from, custom_to, custom_factor, swapped)
    if rule_at(category, rule_index) is None:
        raise UnknownRuleError(f"Unit pair {rule_index} does not exist in '{category_id}'.")
    return CatalogSelection(category.id, rule_index, swapped)


def convert_once(
    value: str,
    category_id: str,
    *,
    rule_index: int = 0,
    swapped: bool = False,
    custom_from: str = "",
    custom_to: str = "",
    custom_factor: str = "",
) -> Dict[str, object]:
    """Stateless conversion returning the display model as a dict."""

    selection = build_selection(
        category_id,
        rule_index=rule_index,
        swapped=swapped,
        custom_from=custom_from,
        custom_to=custom_to,
        custom_factor=custom_factor,
    )
    return compute_view(selection, value).to_dict()


def audit_report(findings: Optional[list] = None) -> Dict[str, object]:
    """Return a serialisable summary of :func:`audit_catalog`."""

    findings = audit_catalog() if findings is None else findings
    return {"ok": not findings, "findings": [finding.to_dict() for finding in findings]}


__all__ = [
    "CUSTOM_CATEGORY_ID",
    "CatalogSelection",
    "ConversionError",
    "ConverterSession",
    "CustomSelection",
    "FormulaRule",
    "HistoryEntryNotFoundError",
    "LinearRule",
    "SessionLimitError",
    "SessionNotFoundError",
    "SwapRejectedError",
    "UnknownCategoryError",
    "UnknownRuleError",
    "audit_report",
    "build_selection",
    "configure_session_store",
    "convert_once",
    "delete_session",
    "format_result",
    "get_session",
    "list_catalog",
    "new_session",
    "parse_number",
    "reset_session_store",
]
