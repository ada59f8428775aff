"""
SysGuard - Command Line Interface

This module provides the CLI argument parsing, privilege handling,
logging setup and main entry point for the hardening inspector.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from sysguard import __version__
from sysguard.core.catalogue import Catalogue, default_catalogue
from sysguard.core.check import CheckReport
from sysguard.core.profile import ScanProfile, get_profile, list_available_profiles
from sysguard.core.scanner import collector_for_profile, run_checks
from sysguard.output.json_formatter import JSONFormatter
from sysguard.output.text_formatter import TextFormatter
from sysguard.output.progress import ScanProgress


logger = logging.getLogger("sysguard")


class PrivilegeChecker:
    """Handles privilege checking and warnings for the inspector.

    Some facts can only be read by root: the audit rule listing and
    binding the privileged ports below 1024.
    """

    # Checks that give misleading marks without root privileges
    PRIVILEGED_CHECKS: list[str] = [
        "port",
        "audit",
    ]

    def __init__(self, skip_check: bool = False) -> None:
        """Initialize the privilege checker.

        Args:
            skip_check: If True, skip the root check entirely
        """
        self._skip_check = skip_check
        self._has_root = False
        self._warnings: list[str] = []

    def check_privileges(self) -> bool:
        """Check if the process is running as root.

        Returns:
            True if running as root, False otherwise
        """
        if self._skip_check:
            self._warnings.append(
                "Privilege check skipped (--no-sudo). Some facts may be unavailable."
            )
            return False

        self._has_root = os.geteuid() == 0

        if not self._has_root:
            self._warnings.append(
                "Not running with sudo/root privileges. "
                "Some facts will be unavailable and their marks will fail."
            )
            self._warnings.append(
                f"Checks needing root: {', '.join(self.PRIVILEGED_CHECKS)}"
            )

        return self._has_root

    def print_warnings(self) -> None:
        """Log any privilege-related warnings."""
        for warning in self._warnings:
            logger.warning(warning)

    @property
    def has_warnings(self) -> bool:
        """Check if any warnings were generated."""
        return len(self._warnings) > 0


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Send log records to stderr at a level chosen by the CLI flags."""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


class CLI:
    """Command Line Interface for the hardening inspector.

    Handles argument parsing, profile selection, privilege checking,
    and orchestrates the scan.
    """

    def __init__(self) -> None:
        """Initialize the CLI."""
        self.args: Optional[argparse.Namespace] = None
        self.profile: Optional[ScanProfile] = None
        self.privilege_checker = PrivilegeChecker()
        self._progress: Optional[ScanProgress] = None

    def parse_args(self, argv: Optional[list[str]] = None) -> argparse.Namespace:
        """Parse command line arguments.

        Args:
            argv: Command line arguments (defaults to sys.argv[1:])

        Returns:
            Parsed arguments namespace
        """
        parser = argparse.ArgumentParser(
            prog="sysguard",
            description="Security hardening inspection for Linux hosts",
            epilog="Exit codes: 0=all marks passed, 1=error, 2=failed marks or warnings"
        )

        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {__version__}",
        )

        parser.add_argument(
            "--output", "-o",
            type=str,
            default=None,
            help="Output file path (default: stdout)"
        )

        parser.add_argument(
            "--format", "-f",
            choices=["json", "text"],
            default="json",
            help="Report format (default: json)"
        )

        parser.add_argument(
            "--pretty",
            action="store_true",
            help="Pretty-print JSON output with indentation"
        )

        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Enable verbose output"
        )

        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Only log errors"
        )

        parser.add_argument(
            "--no-progress",
            action="store_true",
            help="Disable progress reporting on stderr"
        )

        parser.add_argument(
            "--no-sudo",
            action="store_true",
            help="Skip the root privilege check"
        )

        parser.add_argument(
            "--profile",
            type=str,
            default=None,
            help="Scan profile (e.g., zh_CN). Defaults to detection from the locale"
        )

        parser.add_argument(
            "--timeout",
            type=float,
            default=None,
            help="Command timeout in seconds, overriding the profile (0 disables)"
        )

        parser.add_argument(
            "--check",
            action="append",
            dest="checks",
            metavar="ID",
            default=None,
            help="Run only this check (repeatable)"
        )

        parser.add_argument(
            "--list-checks",
            action="store_true",
            help="List the checks of the catalogue and exit"
        )

        parser.add_argument(
            "--list-profiles",
            action="store_true",
            help="List the available scan profiles and exit"
        )

        self.args = parser.parse_args(argv)
        return self.args

    def _ensure_profile(self) -> ScanProfile:
        """Load and cache the active scan profile.

        Raises:
            ValueError: If an unknown profile was requested
        """
        if self.profile is None:
            profile_id = self.args.profile if self.args is not None else None
            self.profile = get_profile(profile_id=profile_id)
        return self.profile

    def _select_catalogue(self) -> Catalogue:
        """Get the full catalogue, or the subset named by --check.

        Raises:
            ValueError: If --check names an unknown check
        """
        catalogue = default_catalogue()
        if self.args is None or not self.args.checks:
            return catalogue

        try:
            return catalogue.subset(self.args.checks)
        except KeyError as e:
            raise ValueError(f"{e.args[0]}. Valid ids: {', '.join(catalogue.get_check_ids())}") from None

    def list_checks(self) -> None:
        """Print id, name and report keys of every check."""
        for check_class in default_catalogue():
            print(f"{check_class.id:<20} {check_class.name:<32} {', '.join(check_class.keys)}")

    def list_profiles(self) -> None:
        """Print the available scan profiles."""
        for profile_id in list_available_profiles(include_base=True):
            print(profile_id)

    def run_scan(self) -> int:
        """Run the scan and write the report.

        Returns:
            Exit code (0=all marks passed, 1=error, 2=failed marks)
        """
        profile = self._ensure_profile()
        catalogue = self._select_catalogue()

        timeout = self.args.timeout if self.args else None
        collector = collector_for_profile(profile, timeout=timeout)

        disable_progress = self.args.no_progress if self.args else False

        logger.debug("Using scan profile '%s'", profile.profile_id)
        logger.debug("Executing %d checks", len(catalogue))

        if disable_progress:
            reports = run_checks(catalogue=catalogue, collector=collector, profile=profile)
        else:
            self._progress = ScanProgress(total=len(catalogue))
            with self._progress:
                reports = run_checks(
                    catalogue=catalogue,
                    collector=collector,
                    profile=profile,
                    progress_callback=self._progress,
                )

        try:
            self._write_report(reports, profile, catalogue)
        except BrokenPipeError:
            # Common when piping to tools like `head`; treat as graceful termination.
            return 0
        except (OSError, UnicodeError) as e:
            logger.error("Error writing scan output: %s", e)
            return 1

        failed = sum(1 for r in reports if not r.passed)
        degraded = sum(1 for r in reports if r.degraded)
        if failed or degraded:
            logger.info("%d check(s) with failed marks, %d with unavailable facts", failed, degraded)
            return 2

        return 0

    def _write_report(self, reports: list[CheckReport], profile: ScanProfile, catalogue: Catalogue) -> None:
        """Write the report to --output or stdout in the chosen format."""
        output_path = Path(self.args.output) if self.args and self.args.output else None
        report_format = self.args.format if self.args else "json"

        if report_format == "text":
            text_formatter = TextFormatter(catalogue)
            if output_path is not None:
                text_formatter.write_to_file(reports, output_path)
            else:
                text_formatter.write_to_stdout(reports)
        else:
            json_formatter = JSONFormatter(pretty=self.args.pretty if self.args else False)
            if output_path is not None:
                json_formatter.write_to_file(reports, output_path, profile=profile)
            else:
                json_formatter.write_to_stdout(reports, profile=profile)

        if output_path is not None:
            logger.info("Results written to %s", output_path)

    def main(self, argv: Optional[list[str]] = None) -> int:
        """Main entry point for the CLI.

        Args:
            argv: Command line arguments (defaults to sys.argv[1:])

        Returns:
            Exit code (0=success, 1=error, 2=warnings)
        """
        try:
            self.parse_args(argv)
            configure_logging(verbose=self.args.verbose, quiet=self.args.quiet)

            if self.args.list_checks:
                self.list_checks()
                return 0
            if self.args.list_profiles:
                self.list_profiles()
                return 0

            # Validate profile selection early for clearer errors.
            self._ensure_profile()

            self.privilege_checker = PrivilegeChecker(skip_check=self.args.no_sudo)
            self.privilege_checker.check_privileges()
            self.privilege_checker.print_warnings()

            scan_exit_code = self.run_scan()

            if scan_exit_code != 0:
                return scan_exit_code

            if self.privilege_checker.has_warnings:
                return 2  # Warnings present

            return 0

        except ValueError as e:
            logger.error("%s", e)
            return 1
        except KeyboardInterrupt:
            print("\nScan interrupted by user", file=sys.stderr)
            return 1
        except Exception as e:
            logger.error("Unexpected error: %s", e, exc_info=bool(self.args and self.args.verbose))
            return 1


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the hardening inspector CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=warnings)
    """
    cli = CLI()
    return cli.main(argv)


if __name__ == "__main__":
    sys.exit(main())
