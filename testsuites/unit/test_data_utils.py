import json
from datetime import date, datetime

import pytest
import yaml

from ui_framework.utils import (
    DataCollector,
    IDate,
    contains_each_other,
    date_range,
    deep_equal,
    does_array_contain_array,
    does_array_match_array,
    get_data,
    get_date_format,
    is_valid_date,
    parse_date,
    read_data,
    remove_from_array_with_values,
    set_data,
    shift_date,
)
from ui_framework.utils.timedate import now_in_offset, to_strptime

USERS = {
    "accounts": {
        "staff": [
            {"username": "alice", "tag": "admin", "password": "secret"},
            {"username": "bob", "tag": "viewer"},
        ]
    },
    "products": [{"name": "Apple"}, {"name": "Banana"}],
}


# =============================================================================
# Comparison
# =============================================================================

@pytest.mark.parametrize(
    "a, b, equal",
    [
        ([1, 2, 2], [2, 1, 2], True),
        ([1, 2, 2], [1, 1, 2], False),
        ({"a": [1, {"b": 2}]}, {"a": [{"b": 2}, 1]}, True),
        ({"a": 1}, {"a": 1, "b": 2}, False),
        ([1], 1, False),
        ((1, 2), [2, 1], True),
    ],
)
def test_deep_equal(a, b, equal):
    assert deep_equal(a, b) is equal


def test_array_helpers():
    assert does_array_contain_array(["a", "b", "c"], ["c", "a"])
    assert not does_array_contain_array(["a"], ["a", "z"])
    assert contains_each_other(["a", "b", "b"], ["b", "a"])
    assert remove_from_array_with_values(["a", "b", "c"], ["b"]) == ["a", "c"]
    assert does_array_match_array(["a", "b"], ["a", "b"])
    assert not does_array_match_array(["a", "b"], ["b", "a"])
    assert not does_array_match_array(["a"], ["a", "b"])


# =============================================================================
# Dates
# =============================================================================

def test_moment_formats():
    assert to_strptime("DD.MM.YYYY HH:mm") == "%d.%m.%Y %H:%M"
    assert parse_date("01/02/2024") == datetime(2024, 1, 2)
    assert is_valid_date("2024-02-29", "YYYY-MM-DD")
    assert not is_valid_date("2023-02-29", "YYYY-MM-DD")


def test_idate():
    start = IDate.from_string("January 30, 2024")
    assert start == IDate(2024, 1, 30)
    assert start.weekday == "Tuesday"
    assert start.to_date_string() == "January 30, 2024"
    assert start.to_format("YYYY-MM-DD") == "2024-01-30"
    assert start.add_days(3) == IDate(2024, 2, 2)
    assert IDate(2024, 2, 2).days_since(start) == 3
    assert start.compare(IDate(2024, 1, 30)) == 0
    assert [d.day for d in date_range(start, IDate(2024, 2, 1))] == [30, 31, 1]
    assert date_range(IDate(2024, 2, 1), start) == []
    with pytest.raises(ValueError):
        IDate.from_string("30th of January")


def test_now_in_offset_reads_configured_offset(monkeypatch):
    monkeypatch.setenv("TIMEZONE__OFFSET_HOURS", "0")
    utc = now_in_offset(0)
    assert abs((now_in_offset() - utc).total_seconds()) < 5


@pytest.mark.parametrize(
    "text, kind",
    [("2020-2024", "year-range"), ("2024", "year"), ("March 2024", "month year"), ("Q1 2024", "invalid")],
)
def test_get_date_format(text, kind):
    assert get_date_format(text) == kind


@pytest.mark.parametrize(
    "start, shift, expected",
    [
        (date(2024, 1, 31), {"months": 1}, date(2024, 2, 29)),
        (date(2023, 1, 31), {"months": 1}, date(2023, 2, 28)),
        (date(2024, 2, 29), {"years": 1}, date(2025, 2, 28)),
        (date(2024, 12, 30), {"days": 2, "months": 1}, date(2025, 2, 1)),
        (date(2024, 3, 15), {"months": -3}, date(2023, 12, 15)),
    ],
)
def test_shift_date_clamps_day_of_month(start, shift, expected):
    assert shift_date(start, **shift) == expected


# =============================================================================
# Test data files
# =============================================================================

@pytest.fixture(params=["json", "yaml"])
def users_file(request, tmp_path):
    path = tmp_path / f"users.{request.param}"
    if request.param == "json":
        path.write_text(json.dumps(USERS), encoding="utf-8")
    else:
        path.write_text(yaml.safe_dump(USERS), encoding="utf-8")
    return path


def test_read_and_query(users_file):
    assert read_data(users_file) == USERS
    assert get_data(users_file, "$.products[*].name") == ["Apple", "Banana"]
    collector = DataCollector(users_file)
    assert collector.query_first("$.accounts.staff[1].username") == "bob"
    assert sorted(collector.query_all("$..tag")) == ["admin", "viewer"]


def test_get_user_data_searches_nested_records(users_file):
    collector = DataCollector(users_file)
    assert collector.get_user_data(tag="admin")["username"] == "alice"
    assert collector.get_user_data(username="bob")["tag"] == "viewer"
    assert collector.get_user_data(username="carol") is None
    with pytest.raises(ValueError):
        collector.get_user_data()


def test_set_first_writes_back(users_file):
    collector = DataCollector(users_file)
    collector.set_first("$.products[*].name", "Apricot")

    assert DataCollector(users_file).query_all("$.products[*].name") == ["Apricot", "Banana"]
    with pytest.raises(KeyError):
        collector.set_first("$.orders[0]", 1)


def test_set_data_updates_every_match(users_file):
    set_data(users_file, "$.products[*].name", "Fig")
    assert get_data(users_file, "$.products[*].name") == ["Fig", "Fig"]


def test_unparsable_file_raises_value_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        read_data(path)
