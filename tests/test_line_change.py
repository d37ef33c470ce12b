"""Tests for core/line_change.py."""

from __future__ import annotations

import pytest

from aiplugin.core.line_change import (
    LineChange,
    LineChangeType,
    line_changes_to_dict,
    parse_line_change,
    parse_line_changes,
)


def test_parse_wire_format_with_string_keys():
    changes = parse_line_changes(
        {
            "1": {"changeType": "Added", "content": "new"},
            "3": {"changeType": "Modified", "content": "b", "originalContent": "a"},
            "7": {"changeType": "Deleted", "content": "gone"},
        }
    )

    assert changes == {
        1: LineChange(LineChangeType.ADDED, "new"),
        3: LineChange(LineChangeType.MODIFIED, "b", "a"),
        7: LineChange(LineChangeType.DELETED, "gone"),
    }


def test_change_type_is_case_insensitive():
    assert parse_line_change({"changeType": "context", "content": "x"}).change_type is LineChangeType.CONTEXT


def test_deleted_may_omit_content():
    assert parse_line_change({"changeType": "Deleted"}) == LineChange.deleted("")


@pytest.mark.parametrize(
    "value, fragment",
    [
        ({"changeType": "Renamed", "content": "x"}, "Unknown changeType"),
        ({"content": "x"}, "missing 'changeType'"),
        ({"changeType": "Added"}, "missing 'content'"),
        ("Added", "must be an object"),
    ],
)
def test_invalid_line_change(value, fragment):
    with pytest.raises(ValueError, match=fragment):
        parse_line_change(value)


@pytest.mark.parametrize("key", ["abc", "0", -2, True])
def test_invalid_line_numbers(key):
    with pytest.raises(ValueError):
        parse_line_changes({key: {"changeType": "Added", "content": "x"}})


def test_duplicate_line_numbers_are_rejected():
    with pytest.raises(ValueError, match="more than once"):
        parse_line_changes(
            {
                "2": {"changeType": "Added", "content": "x"},
                2: {"changeType": "Added", "content": "y"},
            }
        )


def test_typed_values_pass_through():
    change = LineChange.modified("new")

    assert parse_line_changes({4: change}) == {4: change}


def test_encode_orders_by_line_number():
    encoded = line_changes_to_dict({10: LineChange.added("z"), 2: LineChange.modified("b", "a")})

    assert list(encoded) == ["2", "10"]
    assert encoded["2"] == {"changeType": "Modified", "content": "b", "originalContent": "a"}
    assert encoded["10"] == {"changeType": "Added", "content": "z"}
