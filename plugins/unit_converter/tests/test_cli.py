"""Smoke tests for the Unit Converter CLI."""

from __future__ import annotations

import json
from contextlib import redirect_stdout
from io import StringIO

import pytest

from plugins.unit_converter import cli


def _run_cli(args: list[str]) -> tuple[int, dict[str, object]]:
    buffer = StringIO()
    with redirect_stdout(buffer):
        code = cli.main(args)
    return code, json.loads(buffer.getvalue())


def test_cli_categories():
    code, payload = _run_cli(["categories"])
    assert code == 0
    assert payload["categories"][0]["id"] == "length"


def test_cli_convert_and_swap():
    code, payload = _run_cli(["convert", "--category", "length", "1000"])
    assert code == 0
    assert payload["result"] == "3,280.84"

    _, payload = _run_cli(["convert", "--category", "length", "--swap", "3,280.84"])
    assert payload["result"] == "1,000"


def test_cli_custom():
    _, payload = _run_cli(["custom", "--from", "Cups", "--to", "Spoons", "--factor", "16", "2"])
    assert payload["result"] == "32"
    assert payload["category_label"] == "Custom: Cups ↔ Spoons"


def test_cli_audit_passes():
    code, payload = _run_cli(["audit"])
    assert code == 0
    assert payload["ok"] is True


def test_cli_rejects_unknown_category():
    with pytest.raises(SystemExit):
        cli.main(["convert", "--category", "bogus", "1"])
