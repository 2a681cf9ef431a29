"""Tests for environment-backed configuration helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from proclifecycle.config import ConfigurationError, env_bool, env_float, env_seconds, env_str
from proclifecycle.config import runtime
from proclifecycle.config.runtime_helpers import DotenvLoader, parse_dotenv_line


class TestEnvStr:
    def test_returns_stripped_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROCLIFECYCLE_TEST_VALUE", "  hello ")
        assert env_str("PROCLIFECYCLE_TEST_VALUE") == "hello"

    def test_blank_falls_back_to_or_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROCLIFECYCLE_TEST_VALUE", "   ")
        assert env_str("PROCLIFECYCLE_TEST_VALUE", "fallback") == "fallback"

    def test_required_missing_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="PROCLIFECYCLE_TEST_MISSING"):
            env_str("PROCLIFECYCLE_TEST_MISSING", required=True)

    def test_reads_dotenv_default_when_unset(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        dotenv = tmp_path / ".env"
        dotenv.write_text("# comment\nexport PROCLIFECYCLE_TEST_VALUE='from-file'\n")
        monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", (dotenv,))
        runtime.reset_default_values()

        assert env_str("PROCLIFECYCLE_TEST_VALUE") == "from-file"

    def test_environment_wins_over_dotenv(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        dotenv = tmp_path / ".env"
        dotenv.write_text("PROCLIFECYCLE_TEST_VALUE=from-file\n")
        monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", (dotenv,))
        runtime.reset_default_values()
        monkeypatch.setenv("PROCLIFECYCLE_TEST_VALUE", "from-env")

        assert env_str("PROCLIFECYCLE_TEST_VALUE") == "from-env"


class TestEnvFloat:
    def test_parses_float(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROCLIFECYCLE_TEST_FLOAT", "0.25")
        assert env_float("PROCLIFECYCLE_TEST_FLOAT") == 0.25

    def test_invalid_float_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROCLIFECYCLE_TEST_FLOAT", "fast")
        with pytest.raises(ConfigurationError, match="must be a float"):
            env_float("PROCLIFECYCLE_TEST_FLOAT")


class TestEnvBool:
    @pytest.mark.parametrize("raw, expected", [("1", True), ("yes", True), ("OFF", False), ("f", False)])
    def test_parses_booleans(self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
        monkeypatch.setenv("PROCLIFECYCLE_TEST_BOOL", raw)
        assert env_bool("PROCLIFECYCLE_TEST_BOOL") is expected

    def test_invalid_bool_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROCLIFECYCLE_TEST_BOOL", "maybe")
        with pytest.raises(ConfigurationError):
            env_bool("PROCLIFECYCLE_TEST_BOOL")


class TestEnvSeconds:
    def test_default_when_unset(self) -> None:
        assert env_seconds("PROCLIFECYCLE_TEST_SECONDS", or_value=1.5) == 1.5

    @pytest.mark.parametrize("raw", ["0", "-1"])
    def test_non_positive_raises(self, monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
        monkeypatch.setenv("PROCLIFECYCLE_TEST_SECONDS", raw)
        with pytest.raises(ConfigurationError, match="Must be positive"):
            env_seconds("PROCLIFECYCLE_TEST_SECONDS")


class TestDotenvLoader:
    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert DotenvLoader.load_from_file(tmp_path / "absent.env") == {}

    def test_skips_comments_and_lines_without_assignment(self, tmp_path: Path) -> None:
        dotenv = tmp_path / ".env"
        dotenv.write_text('# header\n\nNOT_AN_ASSIGNMENT\nKEY="value"\n')
        assert DotenvLoader.load_from_file(dotenv) == {"KEY": "value"}

    def test_earlier_files_win(self, tmp_path: Path) -> None:
        first, second = tmp_path / "first.env", tmp_path / "second.env"
        first.write_text("PROCLIFECYCLE_A=1\n")
        second.write_text("PROCLIFECYCLE_A=2\nPROCLIFECYCLE_B=3\n")

        assert DotenvLoader([first, tmp_path / "absent.env", second]).load() == {
            "PROCLIFECYCLE_A": "1",
            "PROCLIFECYCLE_B": "3",
        }


class TestParseDotenvLine:
    @pytest.mark.parametrize(
        "line, expected",
        [
            ("KEY=value", ("KEY", "value")),
            ("export KEY = value ", ("KEY", "value")),
            ("KEY='a # b'", ("KEY", "a # b")),
            ('KEY="quoted"', ("KEY", "quoted")),
            ("KEY=value # trailing", ("KEY", "value")),
            ("KEY=", ("KEY", "")),
        ],
    )
    def test_parses(self, line: str, expected: tuple) -> None:
        assert parse_dotenv_line(line) == expected

    @pytest.mark.parametrize("line", ["", "   ", "# KEY=value", "NO_ASSIGNMENT", "=value"])
    def test_skips(self, line: str) -> None:
        assert parse_dotenv_line(line) is None
