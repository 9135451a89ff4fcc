"""Command line interface for the Unit Converter plugin."""

from __future__ import annotations

import argparse
import json
from typing import Any

from .core import ConversionError, audit_report, convert_once, list_catalog


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))


def command_categories(args: argparse.Namespace) -> int:
    _print({"categories": list_catalog()})
    return 0


def command_convert(args: argparse.Namespace) -> int:
    _print(convert_once(args.value, args.category, rule_index=args.rule, swapped=args.swap))
    return 0


def command_custom(args: argparse.Namespace) -> int:
    _print(
        convert_once(
            args.value,
            "custom",
            swapped=args.swap,
            custom_from=args.from_unit,
            custom_to=args.to_unit,
            custom_factor=args.factor,
        )
    )
    return 0


def command_audit(args: argparse.Namespace) -> int:
    report = audit_report()
    _print(report)
    return 0 if report["ok"] else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Unit Converter CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    categories_parser = subparsers.add_parser("categories", help="List categories and unit pairs")
    categories_parser.set_defaults(func=command_categories)

    convert_parser = subparsers.add_parser("convert", help="Convert a value with a catalog unit pair")
    convert_parser.add_argument("--category", required=True, help="Category id (e.g. length)")
    convert_parser.add_argument("--rule", type=int, default=0, help="Unit pair index within the category")
    convert_parser.add_argument("--swap", action="store_true", help="Convert in the reverse direction")
    convert_parser.add_argument("value", help="Value to convert")
    convert_parser.set_defaults(func=command_convert)

    custom_parser = subparsers.add_parser("custom", help="Convert with a user-defined factor")
    custom_parser.add_argument("--from", dest="from_unit", default="", help="Source unit name")
    custom_parser.add_argument("--to", dest="to_unit", default="", help="Target unit name")
    custom_parser.add_argument("--factor", required=True, help="1 source unit = factor target units")
    custom_parser.add_argument("--swap", action="store_true", help="Convert in the reverse direction")
    custom_parser.add_argument("value", help="Value to convert")
    custom_parser.set_defaults(func=command_custom)

    audit_parser = subparsers.add_parser("audit", help="Check catalog factors against Pint")
    audit_parser.set_defaults(func=command_audit)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except ConversionError as exc:
        parser.error(str(exc))
    return 2  # pragma: no cover - parser.error exits


if __name__ == "__main__":
    raise SystemExit(main())
