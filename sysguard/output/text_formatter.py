"""
SysGuard - Text Output Formatter

Renders scan results as a plain-text inspection sheet: one section per
check with its title, requirement marks and remarks.
"""

import sys
from pathlib import Path
from typing import Optional

from ..core.catalogue import Catalogue
from ..core.check import CheckReport


class TextFormatter:
    """Formatter for scan results as a human-readable sheet.

    Example:
        formatter = TextFormatter(catalogue)
        print(formatter.format(reports))
    """

    RULE = "-" * 60

    def __init__(self, catalogue: Optional[Catalogue] = None) -> None:
        """Initialize the text formatter.

        Args:
            catalogue: Catalogue used to find each check's title key
        """
        self._catalogue = catalogue

    def _title_key(self, report: CheckReport) -> Optional[str]:
        if self._catalogue is None:
            return None
        check_class = self._catalogue.get_check(report.check_id)
        return check_class.title_key if check_class is not None else None

    def _format_report(self, report: CheckReport) -> list[str]:
        title_key = self._title_key(report)
        title = report.findings.get(title_key, "") if title_key else ""
        lines = [f"{title or report.check_name} [{report.check_id}]"]

        for key, text in report.findings.items():
            if key == title_key or not text:
                continue
            for text_line in text.splitlines():
                lines.append(f"  {key:<4} {text_line}")

        for failure in report.failures:
            lines.append(f"  (unavailable) {failure.source}: {failure.reason}")
        if report.error:
            lines.append(f"  (error) {report.error}")
        return lines

    def format(self, reports: list[CheckReport]) -> str:
        """Format check reports as text.

        Returns:
            The rendered sheet, newline terminated
        """
        lines: list[str] = []
        for report in reports:
            lines.append(self.RULE)
            lines.extend(self._format_report(report))
        lines.append(self.RULE)
        return "\n".join(lines) + "\n"

    def write_to_file(self, reports: list[CheckReport], output_path: Path) -> None:
        """Write the rendered sheet to a file."""
        output_path.write_text(self.format(reports), encoding='utf-8')

    def write_to_stdout(self, reports: list[CheckReport]) -> None:
        """Write the rendered sheet to stdout."""
        sys.stdout.write(self.format(reports))
