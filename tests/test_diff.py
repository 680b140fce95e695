# tests/test_diff.py

"""
Tests for field-level change detection.
"""

from datetime import datetime, timezone

import pytest

from core.diff import diff, normalize_value, values_equal
from models.enums import IncidentStatus


SNAPSHOT = {
    "id": "inc-1",
    "hotelId": "H1",
    "statusId": "open",
    "priority": "high",
    "bookingAmount": 120.5,
    "attachments": ["a.png", "b.png"],
    "quotes": [{"supplier": "ACME", "amount": 100}],
    "date": datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
    "resolvedAt": None,
    "extra": {"nested": {"deep": [1, 2, {"x": True}]}},
}


def test_status_change_is_the_only_diff():
    previous = {"status": "open", "hotelId": "H1"}
    new = {"status": "resolved", "hotelId": "H1"}
    assert diff(previous, new) == ["status"]


def test_identical_snapshots_have_no_changes():
    assert diff(SNAPSHOT, dict(SNAPSHOT)) == []


def test_deep_copies_compare_equal():
    import copy

    assert diff(SNAPSHOT, copy.deepcopy(SNAPSHOT)) == []


def test_creation_reports_every_field_but_id():
    assert diff({}, SNAPSHOT) == [key for key in SNAPSHOT if key != "id"]
    assert diff(None, SNAPSHOT) == [key for key in SNAPSHOT if key != "id"]


def test_deletion_reports_every_field_but_id():
    assert diff(SNAPSHOT, {}) == [key for key in SNAPSHOT if key != "id"]
    assert diff(SNAPSHOT, None) == [key for key in SNAPSHOT if key != "id"]


def test_id_change_is_ignored():
    assert diff({"id": "a", "x": 1}, {"id": "b", "x": 1}) == []


def test_added_and_removed_fields():
    previous = {"a": 1, "gone": "x"}
    new = {"a": 1, "added": "y"}
    assert diff(previous, new) == ["added", "gone"]


def test_field_set_to_none_is_a_change():
    assert diff({"notes": "hello"}, {"notes": None}) == ["notes"]


def test_order_is_deterministic():
    previous = {"c": 1, "b": 1, "a": 1, "z": 0}
    new = {"c": 2, "b": 2, "a": 2}
    assert diff(previous, new) == ["c", "b", "a", "z"]
    assert diff(previous, new) == diff(dict(previous), dict(new))


def test_nested_change_is_detected():
    previous = {"extra": {"nested": {"deep": [1, 2]}}}
    new = {"extra": {"nested": {"deep": [1, 3]}}}
    assert diff(previous, new) == ["extra"]


def test_list_order_matters():
    assert diff({"attachments": ["a", "b"]}, {"attachments": ["b", "a"]}) == ["attachments"]


def test_mapping_key_order_does_not_matter():
    assert diff({"m": {"a": 1, "b": 2}}, {"m": {"b": 2, "a": 1}}) == []


def test_bool_is_not_equal_to_int():
    assert diff({"flag": True}, {"flag": 1}) == ["flag"]
    assert diff({"flag": False}, {"flag": 0}) == ["flag"]


def test_int_and_float_with_same_value_are_equal():
    assert diff({"amount": 100}, {"amount": 100.0}) == []


def test_stored_timestamp_equals_datetime():
    moment = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
    stored = {"seconds": int(moment.timestamp()), "nanoseconds": 0}
    assert diff({"date": stored}, {"date": moment}) == []


def test_iso_string_date_field_equals_datetime():
    moment = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
    assert diff({"updatedAt": "2024-05-01T09:30:00Z"}, {"updatedAt": moment}) == []
    assert diff({"clientArrivalDate": "2024-05-01T09:30:00+00:00"}, {"clientArrivalDate": moment}) == []


def test_date_like_strings_outside_date_fields_stay_strings():
    assert diff({"notes": "2024-05-01T09:30:00Z"}, {"notes": "2024-05-01T09:30:00+00:00"}) == ["notes"]


def test_enum_equals_its_value():
    assert values_equal(IncidentStatus.open, "open")


def test_unknown_values_are_compared_by_repr():
    class Thing:
        def __repr__(self):
            return "Thing()"

    assert normalize_value(Thing()) == ("other", "Thing()")
    assert diff({"x": Thing()}, {"x": Thing()}) == []


@pytest.mark.parametrize("value", [None, 0, "", [], {}, "open", 3.5, True, {"seconds": 1, "nanoseconds": 5}])
def test_value_is_equal_to_itself(value):
    assert values_equal(value, value, "field")
