"""
Tests for pr_commenter/env_reader.py
"""

import pytest
from enum import Enum

from pr_commenter.env_reader import get_env_bool, get_env_enum, get_env_int, get_env_str


class SampleEnum(Enum):
    """Sample enum for testing."""
    VALUE_A = "value_a"
    VALUE_B = "VALUE_B"


class TestGetEnvStr:
    """Tests for get_env_str function."""

    def test_returns_env_value(self, monkeypatch):
        monkeypatch.setenv("TEST_VAR", "test_value")
        assert get_env_str("TEST_VAR") == "test_value"

    def test_returns_default_when_not_set(self, monkeypatch):
        monkeypatch.delenv("MISSING_VAR", raising=False)
        assert get_env_str("MISSING_VAR", "default") == "default"

    def test_fallback_key_used(self, monkeypatch):
        monkeypatch.delenv("PRIMARY", raising=False)
        monkeypatch.setenv("FALLBACK", "fallback_value")
        assert get_env_str("PRIMARY", "default", "FALLBACK") == "fallback_value"

    def test_primary_preferred_over_fallback(self, monkeypatch):
        monkeypatch.setenv("PRIMARY", "primary_value")
        monkeypatch.setenv("FALLBACK", "fallback_value")
        assert get_env_str("PRIMARY", "default", "FALLBACK") == "primary_value"

    def test_empty_value_skipped(self, monkeypatch):
        monkeypatch.setenv("PRIMARY", "")
        monkeypatch.setenv("FALLBACK", "used")
        assert get_env_str("PRIMARY", "", "FALLBACK") == "used"


class TestGetEnvInt:
    """Tests for get_env_int function."""

    def test_parses_int(self, monkeypatch):
        monkeypatch.setenv("COUNT", " 12 ")
        assert get_env_int("COUNT", 3) == 12

    def test_invalid_returns_default(self, monkeypatch):
        monkeypatch.setenv("COUNT", "twelve")
        assert get_env_int("COUNT", 3) == 3

    def test_missing_returns_default(self, monkeypatch):
        monkeypatch.delenv("COUNT", raising=False)
        assert get_env_int("COUNT", 3) == 3


class TestGetEnvBool:
    """Tests for get_env_bool function."""

    @pytest.mark.parametrize("value", ["true", "TRUE", "yes", "1"])
    def test_truthy(self, monkeypatch, value):
        monkeypatch.setenv("FLAG", value)
        assert get_env_bool("FLAG", False) is True

    @pytest.mark.parametrize("value", ["false", "No", "0"])
    def test_falsy(self, monkeypatch, value):
        monkeypatch.setenv("FLAG", value)
        assert get_env_bool("FLAG", True) is False

    def test_unrecognized_returns_default(self, monkeypatch):
        monkeypatch.setenv("FLAG", "maybe")
        assert get_env_bool("FLAG", True) is True


class TestGetEnvEnum:
    """Tests for get_env_enum function."""

    def test_match_by_value(self, monkeypatch):
        monkeypatch.setenv("CHOICE", "value_a")
        assert get_env_enum("CHOICE", SampleEnum, SampleEnum.VALUE_B) is SampleEnum.VALUE_A

    def test_match_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("CHOICE", "value_b")
        assert get_env_enum("CHOICE", SampleEnum, SampleEnum.VALUE_A) is SampleEnum.VALUE_B

    def test_match_by_name(self, monkeypatch):
        monkeypatch.setenv("CHOICE", "Value_A")
        assert get_env_enum("CHOICE", SampleEnum, SampleEnum.VALUE_B) is SampleEnum.VALUE_A

    def test_unknown_returns_default(self, monkeypatch):
        monkeypatch.setenv("CHOICE", "other")
        assert get_env_enum("CHOICE", SampleEnum, SampleEnum.VALUE_B) is SampleEnum.VALUE_B
