"""Tests for sort_by / status normalization."""

from enum import Enum

import pytest

from recharge_cli.core.client import ValidationError
from recharge_cli.core.enums import AsyncBatchSort, ChargeSort, SubscriptionStatus
from recharge_cli.core.sorting import allowed_values, normalize_choice, normalize_sort


class TestNormalizeSort:
    def test_absent_sort_by_unchanged(self):
        params = {"limit": 10}
        result = normalize_sort(params, ChargeSort)
        assert result == {"limit": 10}
        assert result is not params

    def test_none_sort_by_unchanged(self):
        assert normalize_sort({"sort_by": None}, ChargeSort) == {"sort_by": None}

    def test_enum_member_becomes_string(self):
        result = normalize_sort({"sort_by": AsyncBatchSort.ID_DESC}, AsyncBatchSort)
        assert result == {"sort_by": "id-desc"}
        assert type(result["sort_by"]) is str

    def test_valid_string_accepted(self):
        assert normalize_sort({"sort_by": "scheduled_at-asc"}, ChargeSort) == {"sort_by": "scheduled_at-asc"}

    def test_invalid_string_lists_allowed_values(self):
        with pytest.raises(ValidationError) as exc:
            normalize_sort({"sort_by": "bogus-value"}, AsyncBatchSort)
        message = exc.value.message
        assert '"bogus-value"' in message
        for value in ("id-asc", "id-desc", "created_at-asc", "created_at-desc"):
            assert value in message
        assert exc.value.details["allowed"] == ["id-asc", "id-desc", "created_at-asc", "created_at-desc"]

    def test_sort_tokens_are_case_sensitive(self):
        with pytest.raises(ValidationError):
            normalize_sort({"sort_by": "ID-DESC"}, ChargeSort)

    def test_token_legal_elsewhere_is_rejected(self):
        # scheduled_at is a charge sort, not an async batch sort
        with pytest.raises(ValidationError):
            normalize_sort({"sort_by": "scheduled_at-asc"}, AsyncBatchSort)

    def test_non_string_rejected(self):
        with pytest.raises(ValidationError):
            normalize_sort({"sort_by": 3}, ChargeSort)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            normalize_sort({"sort_by": "nope"}, ChargeSort)


class TestNormalizeChoice:
    @pytest.mark.parametrize("raw", ["active", "Active", "ACTIVE"])
    def test_status_case_insensitive(self, raw):
        assert normalize_choice({"status": raw}, "status", SubscriptionStatus) == {"status": "ACTIVE"}

    def test_unknown_status(self):
        with pytest.raises(ValidationError, match="Invalid status value"):
            normalize_choice({"status": "sleeping"}, "status", SubscriptionStatus)

    def test_other_keys_untouched(self):
        result = normalize_choice({"status": "paused", "limit": 5}, "status", SubscriptionStatus)
        assert result == {"status": "PAUSED", "limit": 5}


def test_allowed_values():
    class Colour(str, Enum):
        RED = "red"
        BLUE = "blue"

    assert allowed_values(Colour) == ["red", "blue"]
