"""Tests for the ConfigValidator."""

import pytest

from fanpanel.core.validator import ConfigValidationError, ConfigValidator
from fanpanel.domain.schema import default_document


def _curve(**overrides) -> dict:
    base = {"temp_quiet": 50, "temp_low": 58, "temp_med": 65, "temp_high": 72}
    base.update(overrides)
    return base


@pytest.fixture
def validator() -> ConfigValidator:
    return ConfigValidator()


class TestOrdering:
    def test_strictly_increasing_curve_accepted(self, validator: ConfigValidator) -> None:
        assert validator.validate(_curve(shutdown_temp=85)) == []

    def test_equal_neighbours_rejected(self, validator: ConfigValidator) -> None:
        issues = validator.validate(_curve(temp_low=50))
        assert len(issues) == 1
        assert issues[0].field == "temp_low"
        assert issues[0].related == "temp_quiet"
        assert "Low" in issues[0].message
        assert "Quiet" in issues[0].message
        assert "(50)" in issues[0].message

    def test_each_pair_reported(self, validator: ConfigValidator) -> None:
        issues = validator.validate(_curve(temp_quiet=70, temp_low=60, temp_med=50, temp_high=40))
        assert {(i.field, i.related) for i in issues} == {
            ("temp_high", "temp_med"),
            ("temp_med", "temp_low"),
            ("temp_low", "temp_quiet"),
        }

    def test_shutdown_must_exceed_high(self, validator: ConfigValidator) -> None:
        issues = validator.validate(_curve(temp_high=80, shutdown_temp=75))
        assert len(issues) == 1
        assert "Shutdown temperature (75)" in issues[0].message
        assert "High threshold (80)" in issues[0].message

    def test_pair_skipped_when_one_side_missing(self, validator: ConfigValidator) -> None:
        assert validator.validate({"temp_low": 40, "temp_high": 35}) == []

    def test_defaults_are_valid(self, validator: ConfigValidator) -> None:
        assert validator.validate(default_document()) == []


class TestRanges:
    @pytest.mark.parametrize(
        "field, value, fragment",
        [
            ("temp_high", "95", "at most 90"),
            ("temp_quiet", "20", "at least 30"),
            ("speed_low", "101", "at most 100"),
            ("hysteresis", "0", "at least 1"),
            ("hysteresis", "11", "at most 10"),
            ("shutdown_temp", "69", "at least 70"),
            ("shutdown_temp", "96", "at most 95"),
            ("manual_speed", "-1", "at least 0"),
        ],
    )
    def test_out_of_range_named_with_bound(self, validator, field, value, fragment) -> None:
        issues = validator.validate({field: value})
        assert len(issues) == 1
        assert issues[0].field == field
        assert fragment in issues[0].message

    def test_non_integer_rejected(self, validator: ConfigValidator) -> None:
        issues = validator.validate({"speed_high": "fast"})
        assert "must be an integer" in issues[0].message

    def test_choice_fields(self, validator: ConfigValidator) -> None:
        assert validator.validate({"mode": "manual", "night_end": "07", "enabled": "0"}) == []
        issues = validator.validate({"mode": "turbo"})
        assert issues[0].field == "mode"
        assert "auto" in issues[0].message

    def test_values_are_never_clamped(self, validator: ConfigValidator) -> None:
        document = {"temp_high": "95"}
        validator.validate(document)
        assert document == {"temp_high": "95"}

    def test_metadata_keys_ignored(self, validator: ConfigValidator) -> None:
        assert validator.validate({"_version": "1.0", "_exported": "now"}) == []


class TestCheck:
    def test_check_raises_with_all_issues(self, validator: ConfigValidator) -> None:
        with pytest.raises(ConfigValidationError) as excinfo:
            validator.check(_curve(temp_low=50, hysteresis="20"))
        assert len(excinfo.value.issues) == 2

    def test_check_passes_quietly(self, validator: ConfigValidator) -> None:
        validator.check(_curve())


class TestThresholdsOnly:
    def test_ranges_not_checked(self, validator: ConfigValidator) -> None:
        assert validator.check_thresholds({"temp_quiet": "10", "temp_low": "20"}) == []

    def test_disorder_reported(self, validator: ConfigValidator) -> None:
        issues = validator.check_thresholds({"temp_quiet": "50", "temp_low": "50"})
        assert issues[0].field == "temp_low"

    def test_non_integer_threshold_reported_once(self, validator: ConfigValidator) -> None:
        issues = validator.check_thresholds({"temp_low": "warm", "temp_med": "55", "temp_quiet": "40"})
        assert [i.field for i in issues] == ["temp_low"]


class TestCheckField:
    def test_compared_with_staged_context(self, validator: ConfigValidator) -> None:
        context = {"temp_quiet": "40", "temp_low": "45", "temp_med": "55", "temp_high": "60"}
        issues = validator.check_field("temp_low", "38", context)
        assert issues[0].related == "temp_quiet"

        context["temp_quiet"] = "35"
        assert validator.check_field("temp_low", "38", context) == []

    def test_range_checked_before_ordering(self, validator: ConfigValidator) -> None:
        issues = validator.check_field("temp_high", "99", {"temp_med": "55"})
        assert len(issues) == 1
        assert "at most 90" in issues[0].message

    def test_unknown_option(self, validator: ConfigValidator) -> None:
        issues = validator.check_field("admin_password", "x", {})
        assert "Unknown option" in issues[0].message
