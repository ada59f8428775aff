"""
SysGuard - JSON Output Formatter

This module provides JSON formatting capabilities for scan results.
"""

import json
import socket
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .. import __version__
from ..core.check import CheckReport
from ..core.findings import FindingSet
from ..core.profile import ScanProfile
from ..core.scanner import merge_reports


class DateTimeEncoder(json.JSONEncoder):
    """Custom JSON encoder to handle datetime serialization."""

    def default(self, o: Any) -> Any:
        """Convert datetime objects to ISO format strings."""
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


class JSONFormatter:
    """Formatter for scan results in JSON format.

    This class takes check reports and produces structured JSON output
    with metadata, summary statistics, per-check results and the merged
    finding set.

    Example:
        formatter = JSONFormatter()
        reports = run_checks()
        print(formatter.format(reports, profile=get_profile()))
    """

    SCHEMA_VERSION = "1.0"

    def __init__(self, pretty: bool = False) -> None:
        """Initialize the JSON formatter.

        Args:
            pretty: If True, output formatted JSON with indentation
        """
        self._pretty = pretty

    def format(
        self,
        reports: list[CheckReport],
        profile: Optional[ScanProfile] = None,
    ) -> str:
        """Format check reports as JSON.

        Args:
            reports: List of CheckReport objects from a scan
            profile: Optional scan profile for metadata

        Returns:
            JSON string containing formatted scan results
        """
        output = self._build_output(reports, profile)

        if self._pretty:
            return json.dumps(output, cls=DateTimeEncoder, indent=2, sort_keys=False, ensure_ascii=False)
        else:
            return json.dumps(output, cls=DateTimeEncoder, separators=(',', ':'), ensure_ascii=False)

    def _build_output(
        self,
        reports: list[CheckReport],
        profile: Optional[ScanProfile],
    ) -> dict[str, Any]:
        """Build the output dictionary structure."""
        findings = merge_reports(reports)
        return {
            "metadata": self._build_metadata(profile),
            "summary": self._build_summary(reports),
            "checks": [report.to_dict() for report in reports],
            "findings": self._build_findings(findings),
        }

    def _build_metadata(self, profile: Optional[ScanProfile]) -> dict[str, Any]:
        """Build the metadata section.

        Args:
            profile: Optional scan profile

        Returns:
            Dictionary containing scan metadata
        """
        return {
            "schema_version": self.SCHEMA_VERSION,
            "tool_version": __version__,
            "timestamp": datetime.now(timezone.utc),
            "hostname": socket.gethostname(),
            "profile": profile.profile_id if profile is not None else "unknown",
        }

    def _build_summary(self, reports: list[CheckReport]) -> dict[str, Any]:
        """Build the summary section with statistics.

        Args:
            reports: List of CheckReport objects

        Returns:
            Dictionary containing summary statistics
        """
        passed_marks = failed_marks = 0
        for report in reports:
            passed, failed = report.mark_counts
            passed_marks += passed
            failed_marks += failed

        return {
            "total_checks": len(reports),
            "checks_failed": sum(1 for r in reports if not r.passed),
            "passed_marks": passed_marks,
            "failed_marks": failed_marks,
            "unavailable_facts": sum(len(r.failures) for r in reports),
            "errored_checks": [r.check_id for r in reports if r.error is not None],
        }

    def _build_findings(self, findings: FindingSet) -> dict[str, str]:
        """Build the key -> text section, sorted by key."""
        return findings.to_dict()

    def write_to_file(
        self,
        reports: list[CheckReport],
        output_path: Path,
        profile: Optional[ScanProfile] = None,
    ) -> None:
        """Write formatted JSON results to a file."""
        json_content = self.format(reports, profile)
        output_path.write_text(json_content, encoding='utf-8')

    def write_to_stdout(
        self,
        reports: list[CheckReport],
        profile: Optional[ScanProfile] = None,
    ) -> None:
        """Write formatted JSON results to stdout."""
        json_content = self.format(reports, profile)
        sys.stdout.write(json_content)
        if self._pretty:
            sys.stdout.write('\n')
