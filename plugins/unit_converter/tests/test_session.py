from datetime import timedelta

import pytest

from plugins.unit_converter.core import (
    ConverterSession,
    HistoryEntryNotFoundError,
    SessionLimitError,
    SessionNotFoundError,
    SwapRejectedError,
    UnknownCategoryError,
    UnknownRuleError,
)
from plugins.unit_converter.core.engine import CatalogSelection, CustomSelection
from plugins.unit_converter.core.session import SessionStore


def test_initial_state_is_first_length_pair():
    session = ConverterSession()
    assert session.selection == CatalogSelection("length", 0)
    assert (session.view.input_unit, session.view.output_unit) == ("Meters", "Feet")
    assert session.view.result.text == ""
    assert len(session.history) == 0


def test_input_records_history_once_per_change():
    session = ConverterSession()
    session.set_input("5")
    session.set_input("5")
    session.set_input(" 5 ")
    assert len(session.history) == 1
    entry = session.history.latest()
    assert (entry.input_value, entry.input_unit, entry.result_value, entry.output_unit) == (
        "5",
        "Meters",
        "16.4042",
        "Feet",
    )
    assert entry.category_label == "Length"


def test_repeated_input_after_clearing_records_again():
    session = ConverterSession()
    session.set_input("5")
    session.set_input("")
    session.set_input("5")
    assert len(session.history) == 2
    assert [entry.input_value for entry in session.history] == ["5", "5"]


def test_repeated_input_after_category_round_trip_records_again():
    session = ConverterSession()
    session.set_input("5")
    session.select_category("mass")
    session.select_category("length")
    session.set_input("5")
    assert len(session.history) == 2


def test_history_keeps_ten_most_recent():
    session = ConverterSession()
    for value in range(1, 12):
        session.set_input(str(value))
    inputs = [entry.input_value for entry in session.history]
    assert len(inputs) == 10
    assert inputs[0] == "11"
    assert "1" not in inputs


@pytest.mark.parametrize("raw", ["", "-", "abc", "1e999"])
def test_invalid_inputs_do_not_touch_history(raw):
    session = ConverterSession()
    session.set_input(raw)
    assert len(session.history) == 0


def test_swap_round_trip_uses_previous_result():
    session = ConverterSession()
    session.set_input("1000")
    assert session.view.result.text == "3,280.84"
    session.swap()
    assert session.raw_input == "3,280.84"
    assert session.selection.swapped is True
    assert (session.view.input_unit, session.view.output_unit) == ("Feet", "Meters")
    assert session.view.result.value == pytest.approx(1000, rel=1e-6)
    assert session.view.result.text == "1,000"
    assert len(session.history) == 2


def test_swap_rejected_for_temperature_leaves_state():
    session = ConverterSession()
    session.select_category("temperature")
    session.set_input("10")
    before = (session.selection, session.raw_input, session.view.result.text)
    with pytest.raises(SwapRejectedError):
        session.swap()
    assert (session.selection, session.raw_input, session.view.result.text) == before
    assert session.view.swap_disabled is True


def test_category_and_rule_changes_reset_input():
    session = ConverterSession()
    session.set_input("5")
    session.swap()
    session.select_rule(2)
    assert session.selection == CatalogSelection("length", 2)
    assert session.raw_input == ""
    session.set_input("3")
    session.select_category("mass")
    assert session.selection == CatalogSelection("mass", 0)
    assert session.raw_input == ""


def test_unknown_category_and_rule_raise():
    session = ConverterSession()
    with pytest.raises(UnknownCategoryError):
        session.select_category("bogus")
    with pytest.raises(UnknownRuleError):
        session.select_rule(99)
    session.select_category("custom")
    with pytest.raises(UnknownRuleError):
        session.select_rule(0)


def test_custom_mode_flow():
    session = ConverterSession()
    session.set_custom_units("USD", "EUR")
    session.select_category("custom")
    assert isinstance(session.selection, CustomSelection)
    session.set_input("100")
    assert session.view.result.text == "Factor must be non-zero"
    assert session.view.swap_disabled is True
    with pytest.raises(SwapRejectedError):
        session.swap()
    assert len(session.history) == 0

    session.set_custom_factor("0.85")
    assert session.view.result.text == "85"
    assert session.history.latest().category_label == "Custom: USD ↔ EUR"
    session.swap()
    assert session.raw_input == "85"
    assert (session.view.input_unit, session.view.output_unit) == ("EUR", "USD")
    assert session.view.result.value == pytest.approx(100)


def test_custom_fields_survive_category_switch():
    session = ConverterSession()
    session.select_category("custom")
    session.set_custom_units(from_unit="Cups")
    session.set_custom_factor("2")
    session.select_category("length")
    session.select_category("custom")
    assert session.selection == CustomSelection("Cups", "", "2", False)
    assert session.view.output_unit == "Unit B"


def test_recall_restores_input():
    session = ConverterSession()
    session.set_input("5")
    first = session.history.latest()
    session.set_input("7")
    session.recall(first.id)
    assert session.raw_input == "5"
    with pytest.raises(HistoryEntryNotFoundError):
        session.recall("missing")


def test_clear_history():
    session = ConverterSession()
    session.set_input("5")
    session.clear_history()
    assert len(session.history) == 0
    assert session.to_dict()["history"] == []


def test_store_enforces_capacity():
    store = SessionStore(max_sessions=1)
    store.create()
    with pytest.raises(SessionLimitError):
        store.create()


def test_store_purges_expired_sessions():
    store = SessionStore(ttl=timedelta(minutes=5))
    session = store.create()
    assert store.get(session.session_id) is session
    session.last_accessed -= timedelta(minutes=10)
    with pytest.raises(SessionNotFoundError):
        store.get(session.session_id)
    assert len(store) == 0


def test_store_delete():
    store = SessionStore()
    session = store.create()
    assert store.delete(session.session_id) is True
    assert store.delete(session.session_id) is False
