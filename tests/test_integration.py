"""
SysGuard - Integration Tests

End-to-end tests for the CLI: argument parsing, privilege warnings,
report output and exit codes. The host is replaced by canned facts.
"""

import json
import sys
from pathlib import Path
from unittest import mock

import pytest

# Add project root to import path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sysguard.cli import CLI, main, PrivilegeChecker
from sysguard.core.check import CheckReport
from sysguard.core.facts import StaticFactCollector
from sysguard.output.json_formatter import JSONFormatter


def passing_report() -> CheckReport:
    return CheckReport(
        check_id="operation_timeout",
        check_name="Operation Timeout",
        findings={"A11": "Idle session timeout lock", "B11": "[✓] Operation timeout is 10 minutes or less"},
    )


def failing_report() -> CheckReport:
    return CheckReport(
        check_id="operation_timeout",
        check_name="Operation Timeout",
        findings={"A11": "Idle session timeout lock", "B11": "[✗] Operation timeout is 10 minutes or less"},
    )


class TestPrivilegeChecker:
    """Tests for privilege checking functionality."""

    def test_privilege_checker_defaults(self) -> None:
        """Test privilege checker with default settings."""
        checker = PrivilegeChecker()
        assert checker._skip_check is False
        assert checker._has_root is False
        assert checker._warnings == []

    def test_privilege_checker_skip_check(self) -> None:
        """Test privilege checker with skip_check=True."""
        checker = PrivilegeChecker(skip_check=True)
        assert checker.check_privileges() is False
        assert len(checker._warnings) == 1
        assert "skipped" in checker._warnings[0].lower()

    @mock.patch('os.geteuid')
    def test_privilege_checker_as_root(self, mock_geteuid) -> None:
        """Test privilege checker when running as root."""
        mock_geteuid.return_value = 0

        checker = PrivilegeChecker()
        assert checker.check_privileges() is True
        assert checker.has_warnings is False

    @mock.patch('os.geteuid')
    def test_privilege_checker_not_root(self, mock_geteuid) -> None:
        """Test privilege checker when not running as root."""
        mock_geteuid.return_value = 1000

        checker = PrivilegeChecker()
        assert checker.check_privileges() is False
        assert len(checker._warnings) == 2
        assert "not running with sudo" in checker._warnings[0].lower()
        assert "port, audit" in checker._warnings[1]


class TestCLIArgumentParsing:
    """Tests for CLI argument parsing."""

    def test_cli_parse_no_args(self) -> None:
        """Test CLI with no arguments."""
        args = CLI().parse_args([])

        assert args.output is None
        assert args.format == "json"
        assert args.pretty is False
        assert args.verbose is False
        assert args.quiet is False
        assert args.no_sudo is False
        assert args.profile is None
        assert args.timeout is None
        assert args.checks is None

    def test_cli_parse_combined_args(self) -> None:
        args = CLI().parse_args([
            '-o', 'report.txt',
            '--format', 'text',
            '--profile', 'zh_CN',
            '--timeout', '5',
            '--check', 'port',
            '--check', 'audit',
            '-v',
        ])

        assert args.output == 'report.txt'
        assert args.format == 'text'
        assert args.profile == 'zh_CN'
        assert args.timeout == 5.0
        assert args.checks == ['port', 'audit']
        assert args.verbose is True

    def test_cli_parse_invalid_format(self) -> None:
        with pytest.raises(SystemExit):
            CLI().parse_args(['--format', 'xml'])


class TestListing:
    """Tests for --list-checks and --list-profiles."""

    def test_list_checks(self, capsys) -> None:
        assert main(['--list-checks']) == 0
        out = capsys.readouterr().out
        assert "passwd_complexity" in out
        assert "A19, B19" in out

    def test_list_profiles(self, capsys) -> None:
        assert main(['--list-profiles']) == 0
        out = capsys.readouterr().out.split()
        assert "base" in out
        assert "zh_CN" in out


class TestScanOutput:
    """Tests for a full scan through the CLI against canned facts."""

    def _run(self, argv: list[str], collector: StaticFactCollector) -> int:
        with mock.patch("sysguard.cli.collector_for_profile", return_value=collector):
            return main(argv)

    def test_json_report_to_file(self, tmp_path: Path) -> None:
        path = tmp_path / "report.json"
        collector = StaticFactCollector(files={"/etc/profile": "TMOUT=300\n"})

        exit_code = self._run(
            ['--no-sudo', '--no-progress', '--profile', 'base', '--check', 'operation_timeout', '-o', str(path)],
            collector,
        )

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["findings"] == {
            "A11": "Idle session timeout lock",
            "B11": "[✓] Operation timeout is 10 minutes or less",
        }
        # --no-sudo always leaves a warning behind.
        assert exit_code == 2

    def test_text_report_to_stdout(self, capsys) -> None:
        collector = StaticFactCollector(files={"/etc/issue": "CentOS 7\n"})
        self._run(['--no-sudo', '--no-progress', '--format', 'text', '--check', 'os'], collector)

        out = capsys.readouterr().out
        assert "Operating system [os]" in out
        assert "CentOS 7" in out

    def test_unknown_check_is_error(self, capsys) -> None:
        exit_code = self._run(['--no-sudo', '--check', 'nope'], StaticFactCollector())
        assert exit_code == 1
        err = capsys.readouterr().err
        assert "nope" in err
        assert "Valid ids: os, ip, user_mgmt" in err


class TestExitCodes:
    """Tests for exit code validation."""

    def _cli(self, argv: list[str]) -> CLI:
        cli = CLI()
        cli.parse_args(argv)
        cli.privilege_checker = PrivilegeChecker(skip_check=True)
        return cli

    def test_exit_code_success_all_passed(self) -> None:
        """Test exit code 0 when every mark passes."""
        cli = self._cli(['--no-progress'])

        with mock.patch("sysguard.cli.run_checks", return_value=[passing_report()]):
            with mock.patch.object(JSONFormatter, 'write_to_stdout'):
                exit_code = cli.run_scan()

        assert exit_code == 0

    def test_exit_code_failed_marks(self) -> None:
        """Test exit code 2 when a mark fails."""
        cli = self._cli(['--no-progress'])

        with mock.patch("sysguard.cli.run_checks", return_value=[failing_report()]):
            with mock.patch.object(JSONFormatter, 'write_to_stdout'):
                exit_code = cli.run_scan()

        assert exit_code == 2

    def test_exit_code_broken_pipe(self) -> None:
        cli = self._cli(['--no-progress'])

        with mock.patch("sysguard.cli.run_checks", return_value=[failing_report()]):
            with mock.patch.object(JSONFormatter, 'write_to_stdout', side_effect=BrokenPipeError()):
                exit_code = cli.run_scan()

        assert exit_code == 0

    def test_run_scan_returns_error_when_output_write_fails(self, tmp_path: Path) -> None:
        cli = self._cli(['--no-progress', '--output', str(tmp_path / 'report.json')])

        with mock.patch("sysguard.cli.run_checks", return_value=[passing_report()]):
            with mock.patch.object(JSONFormatter, 'write_to_file', side_effect=OSError("disk full")):
                exit_code = cli.run_scan()

        assert exit_code == 1

    def test_main_exit_code_error(self) -> None:
        """Test exit code 1 on error."""
        with mock.patch.object(CLI, 'parse_args', side_effect=Exception("Test error")):
            assert main() == 1

    def test_main_exit_code_keyboard_interrupt(self) -> None:
        """Test exit code 1 on KeyboardInterrupt."""
        with mock.patch.object(CLI, 'parse_args', side_effect=KeyboardInterrupt()):
            assert main() == 1

    def test_main_exit_code_invalid_profile(self, capsys) -> None:
        """Test exit code 1 when invalid profile is provided."""
        exit_code = main(['--profile', 'definitely-not-a-profile'])
        assert exit_code == 1
        assert "Unknown scan profile" in capsys.readouterr().err
