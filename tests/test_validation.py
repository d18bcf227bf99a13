import pytest
from datetime import datetime, time, timezone

from deepbank.shared.validation import (
    BONUS_CONVERSION_POLICY,
    RECHARGE_POLICY,
    WITHDRAWAL_POLICY,
    AmountValidator,
    ChoiceValidator,
    IbanValidator,
    OperatingHours,
    ValidationErrorKind,
    ValidationResult,
    format_kz,
    require_text,
)


class TestValidationResult:
    def test_valid_result(self):
        result = ValidationResult.ok(123)
        assert result.is_valid is True
        assert result.error_message is None
        assert result.error_kind is None
        assert result.normalized_value == 123

    def test_invalid_result(self):
        result = ValidationResult.fail(
            ValidationErrorKind.NOT_NUMERIC, "Test error", field="amount"
        )
        assert result.is_valid is False
        assert result.error_message == "Test error"
        assert result.details == {"field": "amount"}
        assert result.normalized_value is None


class TestAmountValidatorParseAmount:
    def test_valid_integer(self):
        result = AmountValidator.parse_amount("100")
        assert result.is_valid is True
        assert result.normalized_value == 100

    @pytest.mark.parametrize("raw", ["1.000", "1,000", "1 000", "1000 Kz"])
    def test_grouped_thousands(self, raw):
        result = AmountValidator.parse_amount(raw)
        assert result.is_valid is True
        assert result.normalized_value == 1000

    def test_int_passthrough(self):
        assert AmountValidator.parse_amount(2500).normalized_value == 2500

    def test_empty_string(self):
        result = AmountValidator.parse_amount("")
        assert result.error_kind == ValidationErrorKind.MISSING_REQUIRED_FIELD

    def test_whitespace_only(self):
        result = AmountValidator.parse_amount("   ")
        assert result.error_kind == ValidationErrorKind.MISSING_REQUIRED_FIELD

    def test_none(self):
        result = AmountValidator.parse_amount(None)
        assert result.error_kind == ValidationErrorKind.MISSING_REQUIRED_FIELD

    @pytest.mark.parametrize("raw", ["abc", "12a", "1.5", "1,000.50", "1.00.0", "-10", "+5"])
    def test_not_numeric(self, raw):
        result = AmountValidator.parse_amount(raw)
        assert result.is_valid is False
        assert result.error_kind == ValidationErrorKind.NOT_NUMERIC

    def test_mixed_separators_rejected(self):
        result = AmountValidator.parse_amount("1.000,000")
        assert result.error_kind == ValidationErrorKind.NOT_NUMERIC

    def test_zero_amount(self):
        result = AmountValidator.parse_amount("0")
        assert result.is_valid is False
        assert "zero" in result.error_message.lower()

    def test_bool_rejected(self):
        assert AmountValidator.parse_amount(True).is_valid is False


class TestAmountValidatorBounds:
    def test_recharge_minimum(self):
        result = AmountValidator.validate("499", RECHARGE_POLICY)
        assert result.error_kind == ValidationErrorKind.AMOUNT_BELOW_MINIMUM
        assert result.details["minimum"] == 500

    def test_recharge_has_no_maximum(self):
        assert AmountValidator.validate("1000000", RECHARGE_POLICY).is_valid

    def test_withdrawal_bounds(self):
        assert AmountValidator.validate("3000", WITHDRAWAL_POLICY).is_valid
        assert AmountValidator.validate("200000", WITHDRAWAL_POLICY).is_valid
        result = AmountValidator.validate("200001", WITHDRAWAL_POLICY)
        assert result.error_kind == ValidationErrorKind.AMOUNT_ABOVE_MAXIMUM

    def test_bonus_minimum(self):
        result = AmountValidator.validate("99", BONUS_CONVERSION_POLICY)
        assert result.error_kind == ValidationErrorKind.AMOUNT_BELOW_MINIMUM

    def test_exceeds_balance(self):
        result = AmountValidator.validate("5000", WITHDRAWAL_POLICY, balance=4000)
        assert result.error_kind == ValidationErrorKind.EXCEEDS_BALANCE
        assert result.details["balance"] == 4000

    def test_exact_balance_allowed(self):
        assert AmountValidator.validate("4000", WITHDRAWAL_POLICY, balance=4000).is_valid


class TestOperatingHours:
    @pytest.fixture
    def hours(self):
        return OperatingHours()

    def test_open_during_window(self, hours, clock_at):
        assert hours.check(clock_at(9)()).is_valid
        assert hours.check(clock_at(20, 59)()).is_valid

    def test_closed_at_closing_time(self, hours, clock_at):
        assert hours.check(clock_at(21)()).is_valid is False

    def test_minutes_until_open_after_closing(self, hours, clock_at):
        result = hours.check(clock_at(22)())
        assert result.error_kind == ValidationErrorKind.OUTSIDE_OPERATING_HOURS
        assert result.details["minutes_remaining"] == 11 * 60

    def test_minutes_until_open_early_morning(self, hours, clock_at):
        result = hours.check(clock_at(8, 30)())
        assert result.details["minutes_remaining"] == 30

    def test_utc_clock_is_converted(self, hours):
        # 21:30 UTC is 22:30 in Luanda (UTC+1).
        now = datetime(2024, 6, 3, 21, 30, tzinfo=timezone.utc)
        result = hours.check(now)
        assert result.details["minutes_remaining"] == 630

    def test_partial_minutes_round_up(self, hours):
        now = datetime(2024, 6, 3, 7, 59, 30, tzinfo=timezone.utc)
        assert hours.minutes_until_open(now) == 1

    def test_custom_window(self, clock_at):
        hours = OperatingHours(opens=time(8), closes=time(18))
        assert hours.check(clock_at(8)()).is_valid
        assert hours.check(clock_at(18)()).is_valid is False


class TestChoiceValidator:
    def test_known_choice(self):
        assert ChoiceValidator.validate("bai", ["bai", "bfa"], "bank").is_valid

    def test_missing(self):
        result = ChoiceValidator.validate(None, ["bai"], "bank")
        assert result.error_kind == ValidationErrorKind.MISSING_REQUIRED_FIELD

    def test_unknown(self):
        result = ChoiceValidator.validate("xyz", ["bai"], "bank")
        assert result.error_kind == ValidationErrorKind.UNKNOWN_OPTION


class TestIbanValidator:
    def test_plain_digits(self):
        result = IbanValidator.validate("0" * 21)
        assert result.is_valid
        assert result.normalized_value == "0" * 21

    def test_prefix_and_spaces(self):
        result = IbanValidator.validate("ao06 0040 0000 1234 5678 9012 3")
        assert result.normalized_value == "004000001234567890123"

    @pytest.mark.parametrize("raw", ["1" * 20, "1" * 22, "AO06" + "x" * 21])
    def test_invalid_format(self, raw):
        assert IbanValidator.validate(raw).error_kind == ValidationErrorKind.INVALID_FORMAT

    def test_required(self):
        assert IbanValidator.validate(" ").error_kind == ValidationErrorKind.MISSING_REQUIRED_FIELD


def test_format_kz():
    assert format_kz(12500) == "12 500 Kz"
    assert format_kz(500.0) == "500 Kz"


def test_require_text():
    assert require_text("  Ana  ", "Name").normalized_value == "Ana"
    assert require_text("", "Name").error_kind == ValidationErrorKind.MISSING_REQUIRED_FIELD
