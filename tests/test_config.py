"""
Tests for compiler options and their environment overrides.
"""

import logging

import pytest

from stackc.config import CompilerOptions


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("STACKC_MAX_VARIABLES", "STACKC_DYNAMIC_FRAME", "STACKC_COMMENTS"):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self):
        options = CompilerOptions()
        assert options.entry_symbol == "main"
        assert options.slot_size == 8
        assert options.max_variables == 26
        assert options.dynamic_frame is False
        assert options.output_comments is False

    def test_frame_size(self):
        assert CompilerOptions().frame_size == 208
        assert CompilerOptions(max_variables=4).frame_size == 32

    def test_fixed_frame_rounded_to_16(self):
        assert CompilerOptions(max_variables=3).frame_size == 32
        assert CompilerOptions(max_variables=1).frame_size == 16
        assert CompilerOptions(max_variables=5, slot_size=8).frame_size == 48

    def test_from_env_without_variables(self):
        assert CompilerOptions.from_env() == CompilerOptions()


class TestFromEnv:
    def test_max_variables(self, monkeypatch):
        monkeypatch.setenv("STACKC_MAX_VARIABLES", "64")
        assert CompilerOptions.from_env().max_variables == 64

    @pytest.mark.parametrize("value", ["zero", "0", "-3", "1.5"])
    def test_invalid_max_variables_ignored(self, monkeypatch, caplog, value):
        monkeypatch.setenv("STACKC_MAX_VARIABLES", value)
        with caplog.at_level(logging.WARNING, logger="stackc.config"):
            options = CompilerOptions.from_env()
        assert options.max_variables == 26
        assert "STACKC_MAX_VARIABLES" in caplog.text

    @pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
    def test_true_values(self, monkeypatch, value):
        monkeypatch.setenv("STACKC_DYNAMIC_FRAME", value)
        monkeypatch.setenv("STACKC_COMMENTS", value)
        options = CompilerOptions.from_env()
        assert options.dynamic_frame is True
        assert options.output_comments is True

    @pytest.mark.parametrize("value", ["0", "false", "no", "maybe"])
    def test_other_values_are_false(self, monkeypatch, value):
        monkeypatch.setenv("STACKC_DYNAMIC_FRAME", value)
        assert CompilerOptions.from_env().dynamic_frame is False
