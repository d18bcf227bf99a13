import json
import logging

import pytest

from deepbank.shared.logging import (
    ContextAdapter,
    HumanReadableFormatter,
    LoggingConfig,
    LogLevel,
    StructuredFormatter,
    format_error_for_user,
    get_user_friendly_error,
    sanitize_dict,
    sanitize_message,
)


def make_record(message, **extra):
    record = logging.LogRecord(
        name="deepbank.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSanitizeMessage:
    @pytest.mark.unit
    def test_password_redacted(self):
        assert sanitize_message("login password=hunter2 ok") == "login password=[REDACTED] ok"

    @pytest.mark.unit
    def test_bearer_token_redacted(self):
        sanitized = sanitize_message("Authorization: Bearer abc.def-123")
        assert "abc.def-123" not in sanitized
        assert "Bearer [REDACTED]" in sanitized

    @pytest.mark.unit
    def test_bare_jwt_redacted(self):
        sanitized = sanitize_message("token eyJhbGciOi.eyJzdWIi.c2lnbmF0dXJl leaked")
        assert sanitized == "token [TOKEN_REDACTED] leaked"

    @pytest.mark.unit
    def test_access_token_field_redacted(self):
        sanitized = sanitize_message('{"access_token": "xyz"}')
        assert "xyz" not in sanitized

    @pytest.mark.unit
    def test_iban_masked(self):
        sanitized = sanitize_message("Transfer to 004000001234567890123 done")
        assert sanitized == "Transfer to [IBAN ...0123] done"

    @pytest.mark.unit
    def test_iban_with_country_prefix_masked(self):
        sanitized = sanitize_message("IBAN AO06004000001234567890123")
        assert sanitized == "IBAN [IBAN ...0123]"

    @pytest.mark.unit
    def test_iban_preserved_on_request(self):
        message = "Transfer to 004000001234567890123"
        assert sanitize_message(message, preserve_ibans=True) == message

    @pytest.mark.unit
    def test_short_numbers_untouched(self):
        assert sanitize_message("Amount 12500 Kz") == "Amount 12500 Kz"

    @pytest.mark.unit
    def test_empty(self):
        assert sanitize_message("") == ""


@pytest.mark.unit
def test_sanitize_dict_nested():
    data = {
        "password": "x",
        "api_key": "y",
        "amount": 1000,
        "account": {"iban": "004000001234567890123"},
        "notes": ["call me", {"refresh_token": "z"}],
    }
    sanitized = sanitize_dict(data)

    assert sanitized["password"] == "[REDACTED]"
    assert sanitized["api_key"] == "[REDACTED]"
    assert sanitized["amount"] == 1000
    assert sanitized["account"]["iban"] == "[IBAN ...0123]"
    assert sanitized["notes"][0] == "call me"
    assert sanitized["notes"][1]["refresh_token"] == "[REDACTED]"


class TestUserFriendlyErrors:
    @pytest.mark.unit
    def test_timeout(self):
        message, suggestion = get_user_friendly_error(TimeoutError("Read timed out"))
        assert "timed out" in message
        assert suggestion is not None

    @pytest.mark.unit
    def test_unknown(self):
        assert get_user_friendly_error("kaboom") == ("An unexpected error occurred.", None)

    @pytest.mark.unit
    def test_format_error_for_user(self):
        assert format_error_for_user("Saldo insuficiente") == (
            "Insufficient balance for this operation. Deposit funds and try again."
        )


class TestFormatters:
    @pytest.mark.unit
    def test_structured_formatter_outputs_sanitized_json(self):
        formatter = StructuredFormatter()
        record = make_record(
            "Signed in with password=secret",
            context={"user_id": "user-1", "token": "abc"},
        )
        data = json.loads(formatter.format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "deepbank.test"
        assert data["message"] == "Signed in with password=[REDACTED]"
        assert data["context"] == {"user_id": "user-1", "token": "[REDACTED]"}

    @pytest.mark.unit
    def test_human_readable_formatter(self):
        formatter = HumanReadableFormatter()
        output = formatter.format(make_record("Bearer abcdef"))
        assert "deepbank.test - INFO - Bearer [REDACTED]" in output


@pytest.mark.unit
def test_context_adapter_merges_context():
    adapter = ContextAdapter(logging.getLogger("deepbank.test"), {"feature": "recharge"})
    scoped = adapter.with_context(step=2)

    _, kwargs = scoped.process("msg", {"extra": {"context": {"amount": 1000}}})

    assert kwargs["extra"]["context"] == {"feature": "recharge", "step": 2, "amount": 1000}


@pytest.mark.unit
def test_logging_config_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("DEEPBANK_LOG_LEVEL", "debug")
    monkeypatch.setenv("DEEPBANK_LOG_STDOUT", "yes")
    monkeypatch.setenv("DEEPBANK_DIR", str(tmp_path))

    config = LoggingConfig.from_environment()

    assert config.log_level == LogLevel.DEBUG
    assert config.log_to_stdout is True
    assert config.log_dir == tmp_path


@pytest.mark.unit
def test_logging_config_invalid_level_falls_back(monkeypatch):
    monkeypatch.setenv("DEEPBANK_LOG_LEVEL", "chatty")
    assert LoggingConfig.from_environment().log_level == LogLevel.INFO
