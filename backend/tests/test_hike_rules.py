import pytest

from backend.domain.hike_rules import (
    is_iso_date,
    is_iso_timestamp,
    to_utc_timestamp,
    parse_distance,
    validate_hike,
    validate_observation,
    validate_registration,
)


@pytest.mark.parametrize("raw,expected", [
    ("8.5", 8.5),
    ("12 km", 12.0),
    (" 3", 3.0),
    (7, 7.0),
    ("far", 0.0),
    ("", 0.0),
    (None, 0.0),
])
def test_parse_distance(raw, expected):
    assert parse_distance(raw) == expected


def test_iso_date_only():
    assert is_iso_date("2024-05-01")
    assert not is_iso_date("05/01/2024")
    assert not is_iso_date("2024-5-1")
    assert not is_iso_date("2024-02-30")
    assert not is_iso_date("2024-W01-1")
    assert not is_iso_date("20240501")
    assert not is_iso_date(None)


def test_iso_timestamp_accepts_zulu():
    assert is_iso_timestamp("2024-05-01T10:00:00Z")
    assert is_iso_timestamp("2024-05-01T10:00")
    assert not is_iso_timestamp("ten o'clock")
    assert not is_iso_timestamp("")


def test_validate_hike_full_form():
    good = {"name": "Ridge Walk", "location": "Hills", "date": "2024-05-01", "length": "8",
            "difficulty": "easy", "duration": "3 hours"}
    assert validate_hike(good) == {}

    errors = validate_hike({"name": " ", "date": "yesterday", "length": "0", "difficulty": "extreme"})
    assert set(errors) == {"name", "location", "date", "length", "duration", "difficulty"}
    assert errors["length"] == "Length must be greater than 0"


def test_validate_hike_partial_checks_present_keys_only():
    assert validate_hike({"name": "New name"}, partial=True) == {}
    assert set(validate_hike({"date": "2024/01/01"}, partial=True)) == {"date"}
    assert validate_hike({}, partial=True) == {}


def test_validate_observation():
    assert validate_observation({"type": "wildlife", "comment": "deer", "time": "2024-05-01T10:00:00Z"}) == {}
    errors = validate_observation({"type": "bird", "comment": "", "time": ""})
    assert set(errors) == {"type", "comment", "time"}


@pytest.mark.parametrize("args,message", [
    (("", "a@x.com", "secret1"), "Please fill in all fields"),
    (("A", "a@x.com", "secret1", "secret2"), "Passwords do not match"),
    (("A", "a@x.com", "short"), "Password must be at least 6 characters"),
    (("A", "a@x.com", "secret1", "secret1"), None),
])
def test_validate_registration(args, message):
    assert validate_registration(*args) == message


@pytest.mark.parametrize("raw,expected", [
    ("2024-05-01T10:00:00Z", "2024-05-01T10:00:00.000Z"),
    ("2024-05-01T12:00:00+05:00", "2024-05-01T07:00:00.000Z"),
    ("2024-05-01T10:00", "2024-05-01T10:00:00.000Z"),
    ("2024-05-01T23:30:00.250-02:00", "2024-05-02T01:30:00.250Z"),
])
def test_to_utc_timestamp(raw, expected):
    assert to_utc_timestamp(raw) == expected


def test_to_utc_timestamp_rejects_garbage():
    with pytest.raises(ValueError):
        to_utc_timestamp("ten o'clock")
