"""Number parsing and result formatting for the conversion screen."""

from __future__ import annotations

import math
import re
from typing import Optional

from common.logging import get_logger

logger = get_logger("quickconvert.formatting")

FRACTION_DIGITS = 8
GROUPING_THRESHOLD = 1000

# Leading numeric literal; anything after it is ignored.
_NUMBER_PATTERN = re.compile(
    r"^[+-]?(?:Infinity|(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)"
)


def parse_number(text: str, *, strip_grouping: bool = True) -> Optional[float]:
    """Parse the leading numeric literal of ``text``.

    Comma thousands separators are ignored when ``strip_grouping`` is set so
    grouped results can be fed back as input. Returns ``None`` when no literal
    is present; an overflowing literal yields ``inf`` rather than ``None``.
    """

    if not isinstance(text, str):
        return None
    candidate = text.strip()
    if strip_grouping:
        candidate = candidate.replace(",", "")
    match = _NUMBER_PATTERN.match(candidate)
    if match is None:
        return None
    literal = match.group(0)
    if literal.lstrip("+-") == "Infinity":
        return -math.inf if literal.startswith("-") else math.inf
    return float(literal)


def parse_factor(text: str) -> float:
    """Parse a custom conversion factor; invalid, empty or infinite text gives 0."""

    value = parse_number(text, strip_grouping=False)
    if value is None or not math.isfinite(value):
        return 0.0
    return value


def _group_thousands(formatted: str) -> str:
    integer_part, dot, fraction = formatted.partition(".")
    try:
        grouped = f"{int(integer_part):,}"
    except ValueError:
        logger.debug("thousands grouping skipped for %r", formatted)
        return formatted
    return f"{grouped}{dot}{fraction}"


def format_result(value: float, *, fraction_digits: int = FRACTION_DIGITS) -> str:
    """Render a converted value for display.

    Integers print without a decimal point, other values use at most
    ``fraction_digits`` fractional digits with trailing zeros removed, and
    magnitudes of 1000 or more get comma grouping on the integer part.
    """

    if math.isfinite(value) and value.is_integer():
        formatted = f"{value:.0f}"
    else:
        formatted = f"{value:.{fraction_digits}f}".rstrip("0").rstrip(".")
    if formatted in ("-0", ""):
        formatted = "0"
    if abs(value) >= GROUPING_THRESHOLD:
        formatted = _group_thousands(formatted)
    return formatted


__all__ = [
    "FRACTION_DIGITS",
    "GROUPING_THRESHOLD",
    "format_result",
    "parse_factor",
    "parse_number",
]
