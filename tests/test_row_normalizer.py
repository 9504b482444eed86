"""
tests/test_row_normalizer.py

Pytest unit tests for RowNormalizer.

Randomness is injected through a seeded ``random.Random`` and a fixed
clock; expected synthetic values are computed from a second generator
with the same seed, drawn in the same order (activity, last login,
registered date).
"""

from __future__ import annotations

import random
from datetime import date, datetime, timedelta, timezone

import pytest

from app.mappers.column_mapper import ColumnMapper
from app.normalizers.row_normalizer import RowNormalizer

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _normalizer(seed: int = 7) -> RowNormalizer:
    return RowNormalizer(
        rng=random.Random(seed),
        clock=lambda: NOW,
        id_factory=lambda: "generated-id",
    )


def _normalize(row: dict, *, index: int = 0, seed: int = 7):
    field_map = ColumnMapper().build_field_map(row)
    return _normalizer(seed).normalize(raw_row=row, index=index, field_map=field_map)


# ---------------------------------------------------------------------------
# Identity fields
# ---------------------------------------------------------------------------


class TestIdentityFields:
    def test_mapped_values_are_kept(self) -> None:
        result = _normalize({"user_id": "u-9", "username": "Ann", "email": "ann@example.com"})

        assert result.id == "u-9"
        assert result.name == "Ann"
        assert result.email == "ann@example.com"

    def test_missing_fields_fall_back_to_one_based_index(self) -> None:
        result = _normalize({"unrelated": "x"}, index=4)

        assert result.id == "generated-id"
        assert result.name == "User 5"
        assert result.email == "user5@example.com"

    def test_blank_values_are_treated_as_missing(self) -> None:
        result = _normalize({"id": "  ", "name": "", "email": None})

        assert result.id == "generated-id"
        assert result.name == "User 1"
        assert result.email == "user1@example.com"

    def test_integer_valued_float_id_is_rendered_without_decimal(self) -> None:
        result = _normalize({"id": 42.0})

        assert result.id == "42"

    def test_default_id_factory_generates_unique_ids(self) -> None:
        normalizer = RowNormalizer(rng=random.Random(1), clock=lambda: NOW)
        field_map = ColumnMapper().build_field_map({})

        first = normalizer.normalize(raw_row={}, index=0, field_map=field_map)
        second = normalizer.normalize(raw_row={}, index=1, field_map=field_map)

        assert first.id != second.id


# ---------------------------------------------------------------------------
# Activity score
# ---------------------------------------------------------------------------


class TestActivityScore:
    def test_score_above_ten_is_rescaled_from_percent(self) -> None:
        result = _normalize({"activity_score": 85})

        assert result.activity_score == pytest.approx(8.5)

    def test_string_score_is_parsed(self) -> None:
        result = _normalize({"activity_score": " 6.5 "})

        assert result.activity_score == pytest.approx(6.5)

    def test_score_of_exactly_ten_is_not_rescaled(self) -> None:
        result = _normalize({"activity_score": "10"})

        assert result.activity_score == pytest.approx(10.0)

    @pytest.mark.parametrize("value", ["abc", "", None, "nan"])
    def test_unparseable_score_is_synthesized_from_rng(self, value) -> None:
        expected = 1.0 + random.Random(7).random() * 9.0

        result = _normalize({"activity_score": value, "last_login": "2024-05-01", "registered_date": "2024-01-01"})

        assert result.activity_score == pytest.approx(expected)
        assert 1.0 <= result.activity_score < 10.0


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


class TestTimestamps:
    def test_iso_dates_are_parsed_as_utc(self) -> None:
        result = _normalize({"last_login": "2024-05-30", "registered_date": "2023-12-01T08:30:00Z"})

        assert result.last_login == datetime(2024, 5, 30, tzinfo=timezone.utc)
        assert result.registered_date == datetime(2023, 12, 1, 8, 30, tzinfo=timezone.utc)

    def test_us_style_dates_are_parsed(self) -> None:
        result = _normalize({"last_seen": "05/30/2024"})

        assert result.last_login == datetime(2024, 5, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Jan 5, 2024", datetime(2024, 1, 5, tzinfo=timezone.utc)),
            ("January 5, 2024", datetime(2024, 1, 5, tzinfo=timezone.utc)),
            ("Fri, 05 Jan 2024 10:00:00 GMT", datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc)),
            ("1/5/2024 10:00 AM", datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc)),
        ],
    )
    def test_spreadsheet_date_spellings_are_parsed(self, raw, expected) -> None:
        assert RowNormalizer.parse_timestamp(raw) == expected

    def test_date_and_datetime_cells_are_accepted(self) -> None:
        result = _normalize(
            {"last_login": date(2024, 5, 1), "registered_date": datetime(2024, 1, 1, 9, 0)}
        )

        assert result.last_login == datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert result.registered_date == datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def test_missing_dates_are_synthesized_in_order(self) -> None:
        reference = random.Random(7)
        expected_activity = 1.0 + reference.random() * 9.0
        expected_last_login = NOW - timedelta(days=reference.random() * 30.0)
        expected_registered = NOW - timedelta(days=reference.random() * 365.0)

        result = _normalize({"unrelated": "x"})

        assert result.activity_score == pytest.approx(expected_activity)
        assert result.last_login == expected_last_login
        assert result.registered_date == expected_registered

    def test_unparseable_date_is_synthesized_within_window(self) -> None:
        result = _normalize({"activity_score": 5, "last_login": "not a date", "registered_date": "2024-01-01"})

        assert NOW - timedelta(days=30) < result.last_login <= NOW

    def test_user_record_stores_iso_strings(self) -> None:
        from app.domain.user_activity import UserSegment

        normalized = _normalize({"id": "u1", "last_login": "2024-05-30", "registered_date": "2024-01-01"})
        record = normalized.to_user_record(churn_risk=0.5, segment=UserSegment.OCCASIONAL)

        assert record.last_login == "2024-05-30T00:00:00+00:00"
        assert record.registered_date == "2024-01-01T00:00:00+00:00"


class TestDeterminism:
    def test_same_seed_and_clock_reproduce_row(self) -> None:
        row = {"name": "Bo"}

        assert _normalize(row, seed=3) == _normalize(row, seed=3)


class TestParsers:
    @pytest.mark.parametrize("value", [True, False, float("inf"), "  ", None, 10**400])
    def test_parse_number_rejects_non_numbers(self, value) -> None:
        assert RowNormalizer.parse_number(value) is None

    def test_parse_timestamp_rejects_numbers(self) -> None:
        assert RowNormalizer.parse_timestamp(12345) is None
