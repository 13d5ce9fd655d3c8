"""Tests for settings precedence and config file loading."""

import json

import pytest

from args import parse_args
from cli_config import build_settings, load_config_file, validate_root
from constants import Constants
from nuget.errors import ToolEnvironmentError


class TestLoadConfigFile:

    def test_yaml_section(self, tmp_path):
        path = tmp_path / "nugetlock.yml"
        path.write_text("nugetlock:\n  tfm: net48\n  max-retries: 5\n  timeout: 120\n", encoding="utf-8")

        assert load_config_file(str(path)) == {"tfm": "net48", "max_retries": 5, "timeout": 120}

    def test_json_without_section(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"fail_on_skipped": True}), encoding="utf-8")

        assert load_config_file(str(path)) == {"fail_on_skipped": True}

    def test_unknown_keys_dropped(self, tmp_path, caplog):
        path = tmp_path / "c.yaml"
        path.write_text("tfm: net48\nbogus: 1\n", encoding="utf-8")

        with caplog.at_level("WARNING"):
            assert load_config_file(str(path)) == {"tfm": "net48"}
        assert "bogus" in caplog.text

    def test_empty_file(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config_file(str(path)) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ToolEnvironmentError, match="not found"):
            load_config_file(str(tmp_path / "missing.yml"))

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("tfm: [net48\n", encoding="utf-8")

        with pytest.raises(ToolEnvironmentError):
            load_config_file(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("- net48\n", encoding="utf-8")

        with pytest.raises(ToolEnvironmentError):
            load_config_file(str(path))


class TestBuildSettings:

    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        settings = build_settings(parse_args([]), environ={})

        assert settings.tfm == Constants.DEFAULT_TFM
        assert settings.root == str(tmp_path)
        assert settings.fail_on_skipped is False
        assert settings.max_retries == Constants.MAX_RETRIES
        assert settings.timeout is None
        assert settings.dotnet is None

    def test_cli_beats_config_beats_env(self, tmp_path):
        config = tmp_path / "c.yml"
        config.write_text("tfm: net46\nmax_retries: 3\ntimeout: 60\n", encoding="utf-8")
        env = {"NUGETLOCK_TFM": "net45", "NUGETLOCK_MAX_RETRIES": "7", "NUGETLOCK_DOTNET": "/env/dotnet"}

        settings = build_settings(parse_args(["-c", str(config), "--tfm", "net48"]), environ=env)

        assert settings.tfm == "net48"
        assert settings.max_retries == 3
        assert settings.timeout == 60.0
        assert settings.dotnet == "/env/dotnet"

    def test_env_values(self):
        env = {"NUGETLOCK_TIMEOUT": "30", "NUGETLOCK_MAX_RETRIES": "4"}

        settings = build_settings(parse_args([]), environ=env)

        assert settings.timeout == 30.0
        assert settings.max_retries == 4

    def test_invalid_env_value(self):
        with pytest.raises(ToolEnvironmentError):
            build_settings(parse_args([]), environ={"NUGETLOCK_MAX_RETRIES": "lots"})

    def test_fail_on_skipped_from_config(self, tmp_path):
        config = tmp_path / "c.yml"
        config.write_text("fail-on-skipped: true\n", encoding="utf-8")

        settings = build_settings(parse_args(["-c", str(config)]), environ={})

        assert settings.fail_on_skipped is True

    def test_convert_options(self):
        settings = build_settings(parse_args(["--tfm", "net48", "--max-retries", "2"]), environ={})

        options = settings.convert_options()

        assert options.tfm == "net48"
        assert options.max_retries == 2
        assert options.fail_on_skipped is False


class TestValidateRoot:

    def test_existing_directory(self, tmp_path):
        assert validate_root(str(tmp_path)) == str(tmp_path)

    def test_missing(self, tmp_path):
        with pytest.raises(ToolEnvironmentError, match="does not exist"):
            validate_root(str(tmp_path / "nope"))

    def test_file(self, tmp_path):
        f = tmp_path / "file.txt"
        f.write_text("x", encoding="utf-8")

        with pytest.raises(ToolEnvironmentError, match="not a directory"):
            validate_root(str(f))
