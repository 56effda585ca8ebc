"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from booking_engine.config import AppConfig, _safe_bool, _safe_int, _validate_config
from tests.conftest import make_config


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_zero_slot_duration(self):
        config = make_config()
        config = replace(config, scheduling=replace(config.scheduling, default_slot_duration_minutes=0))
        with pytest.raises(ValueError, match="DEFAULT_SLOT_DURATION_MINUTES"):
            _validate_config(config)

    def test_negative_buffer(self):
        config = make_config()
        config = replace(config, scheduling=replace(config.scheduling, default_buffer_minutes=-1))
        with pytest.raises(ValueError, match="DEFAULT_BUFFER_MINUTES"):
            _validate_config(config)

    def test_unknown_timezone(self):
        with pytest.raises(ValueError, match="BUSINESS_TIMEZONE"):
            _validate_config(make_config(business_timezone="Mars/Olympus_Mons"))

    def test_negative_min_advance(self):
        with pytest.raises(ValueError, match="MIN_ADVANCE_MINUTES"):
            _validate_config(make_config(min_advance_minutes=-10))

    def test_zero_payment_window(self):
        with pytest.raises(ValueError, match="PAYMENT_WINDOW_MINUTES"):
            _validate_config(make_config(payment_window_minutes=0))

    def test_api_prefix_needs_slash(self):
        config = make_config()
        config = replace(config, api=replace(config.api, prefix="api"))
        with pytest.raises(ValueError, match="API_PREFIX"):
            _validate_config(config)


class TestEnvParsing:
    def test_safe_int_default(self):
        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("BOOKING_TEST_INT", "ten")
        with pytest.raises(ValueError, match="BOOKING_TEST_INT"):
            _safe_int("BOOKING_TEST_INT", "1")

    @pytest.mark.parametrize("raw,expected", [("true", True), ("YES", True), ("0", False), ("off", False)])
    def test_safe_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("BOOKING_TEST_FLAG", raw)
        assert _safe_bool("BOOKING_TEST_FLAG", "false") is expected

    def test_safe_bool_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("BOOKING_TEST_FLAG", "maybe")
        with pytest.raises(ValueError, match="BOOKING_TEST_FLAG"):
            _safe_bool("BOOKING_TEST_FLAG", "false")
