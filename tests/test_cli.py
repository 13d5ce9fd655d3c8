"""Tests for argument parsing and the nugetlock entry point."""

import json
from unittest.mock import patch

import pytest

import nugetlock
from args import parse_args
from conftest import FakeResolver, failed, nu1202, ok, write_packages_config
from constants import ExitCodes


class TestParseArgs:

    def test_defaults(self):
        ns = parse_args([])
        assert ns.TFM is None
        assert ns.ROOT is None
        assert ns.FAIL_ON_SKIPPED is None
        assert ns.LOG_LEVEL is None

    def test_all_options(self):
        ns = parse_args([
            "--tfm", "net48",
            "--root", "/repo",
            "--fail-on-skipped",
            "--max-retries", "5",
            "--timeout", "90",
            "--dotnet", "/usr/bin/dotnet",
            "--config", "cfg.yml",
            "--output", "report.json",
            "--loglevel", "debug",
            "--logfile", "run.log",
        ])
        assert ns.TFM == "net48"
        assert ns.ROOT == "/repo"
        assert ns.FAIL_ON_SKIPPED is True
        assert ns.MAX_RETRIES == 5
        assert ns.TIMEOUT == 90.0
        assert ns.DOTNET == "/usr/bin/dotnet"
        assert ns.CONFIG == "cfg.yml"
        assert ns.OUTPUT == "report.json"
        assert ns.LOG_LEVEL == "DEBUG"
        assert ns.LOG_FILE == "run.log"

    def test_unknown_option_exits_2(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--bogus"])
        assert exc_info.value.code == 2

    def test_missing_value_exits_2(self):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--tfm"])
        assert exc_info.value.code == 2

    def test_rejects_zero_retries(self):
        with pytest.raises(SystemExit):
            parse_args(["--max-retries", "0"])

    def test_help_exits_0(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--help"])
        assert exc_info.value.code == 0
        assert "--fail-on-skipped" in capsys.readouterr().out


def _run(argv, resolver):
    with patch("nugetlock.locate_dotnet", return_value="/usr/bin/dotnet"), \
            patch("nugetlock.DotnetResolver", return_value=resolver):
        with pytest.raises(SystemExit) as exc_info:
            nugetlock.main(argv)
    return exc_info.value.code


class TestMain:

    def test_all_succeeded(self, tmp_path):
        write_packages_config(str(tmp_path / "app"), [("A", "1.0")])

        code = _run(["--root", str(tmp_path)], FakeResolver([ok()]))

        assert code == ExitCodes.SUCCESS.value
        assert (tmp_path / "app" / "packages.lock.json").is_file()

    def test_failure_exits_1(self, tmp_path):
        write_packages_config(str(tmp_path), [("A", "1.0")])

        code = _run(["--root", str(tmp_path)], FakeResolver([failed(stderr="error NU1101: nope")]))

        assert code == ExitCodes.FAILURE.value

    def test_skips_without_strict_flag_exit_0(self, tmp_path):
        write_packages_config(str(tmp_path), [("A", "1.0"), ("B", "2.0")])
        resolver = FakeResolver([failed(stdout=nu1202("B", "2.0")), ok()])

        code = _run(["--root", str(tmp_path)], resolver)

        assert code == ExitCodes.SUCCESS.value
        assert (tmp_path / "packages.lock.json").is_file()

    def test_fail_on_skipped_exits_2(self, tmp_path, caplog):
        write_packages_config(str(tmp_path), [("A", "1.0"), ("B", "2.0")])
        resolver = FakeResolver([failed(stdout=nu1202("B", "2.0")), ok()])

        code = _run(["--root", str(tmp_path), "--fail-on-skipped"], resolver)

        assert code == ExitCodes.SKIPPED_PACKAGES.value
        assert "B@2.0" in caplog.text

    def test_no_manifests_exit_0(self, tmp_path, caplog):
        code = _run(["--root", str(tmp_path)], FakeResolver([ok()]))

        assert code == ExitCodes.SUCCESS.value
        assert "No packages.config files found" in caplog.text

    def test_invalid_root_exits_1_before_dotnet_lookup(self, tmp_path):
        with patch("nugetlock.locate_dotnet") as mock_locate:
            with pytest.raises(SystemExit) as exc_info:
                nugetlock.main(["--root", str(tmp_path / "missing")])

        assert exc_info.value.code == ExitCodes.FAILURE.value
        mock_locate.assert_not_called()

    def test_dotnet_missing_exits_1(self, tmp_path):
        from nuget.errors import ToolEnvironmentError

        with patch("nugetlock.locate_dotnet", side_effect=ToolEnvironmentError("dotnet CLI is required")):
            with pytest.raises(SystemExit) as exc_info:
                nugetlock.main(["--root", str(tmp_path)])

        assert exc_info.value.code == ExitCodes.FAILURE.value

    def test_json_report_written(self, tmp_path):
        write_packages_config(str(tmp_path / "repo"), [("A", "1.0"), ("B", "2.0")])
        report_path = tmp_path / "report.json"
        resolver = FakeResolver([failed(stdout=nu1202("B", "2.0")), ok()])

        code = _run(["--root", str(tmp_path / "repo"), "-o", str(report_path)], resolver)

        assert code == 0
        data = json.loads(report_path.read_text(encoding="utf-8"))
        assert data["totals"]["succeeded"] == 1
        assert data["skipped"] == [{"id": "B", "version": "2.0"}]
        assert data["manifests"][0]["skipped"][0]["reason"] == "IncompatibleWithTarget"

    def test_timeout_passed_to_resolver(self, tmp_path):
        with patch("nugetlock.locate_dotnet", return_value="/usr/bin/dotnet"), \
                patch("nugetlock.DotnetResolver", return_value=FakeResolver([ok()])) as mock_cls:
            with pytest.raises(SystemExit):
                nugetlock.main(["--root", str(tmp_path), "--timeout", "45"])

        mock_cls.assert_called_once_with("/usr/bin/dotnet", timeout=45.0)

    def test_unwritable_logfile_exits_1(self, tmp_path, caplog):
        log_file = tmp_path / "missing-dir" / "run.log"

        with patch("nugetlock.locate_dotnet") as mock_locate:
            with pytest.raises(SystemExit) as exc_info:
                nugetlock.main(["--root", str(tmp_path), "--logfile", str(log_file)])

        assert exc_info.value.code == ExitCodes.FAILURE.value
        assert "log file couldn't be opened" in caplog.text
        mock_locate.assert_not_called()
