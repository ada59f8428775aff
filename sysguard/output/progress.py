"""
SysGuard - Scan Progress

Reports check progress on stderr from the catalogue's start/complete
events. Finished checks get one line each; terminals also see the
check currently running. A summary line closes the scan.
"""

import sys
from collections import Counter
from typing import Optional, TextIO

from sysguard.core.check import CheckReport


def report_status(report: CheckReport) -> str:
    """Classify a finished check as passed, failed or degraded."""
    if report.degraded:
        return "degraded"
    return "passed" if report.passed else "failed"


class ScanProgress:
    """Progress reporter usable as a ``Catalogue.run_all`` callback.

    Example:
        with ScanProgress(total=len(catalogue)) as progress:
            run_checks(catalogue, collector, progress_callback=progress)
    """

    SYMBOLS = {
        "running": "◐",
        "passed": "✓",
        "failed": "✗",
        "degraded": "⊘",
    }

    def __init__(self, total: int, file: Optional[TextIO] = None) -> None:
        self.total = total
        self.file = file or sys.stderr
        self.current = 0
        self.counts: Counter = Counter()
        self._is_tty = hasattr(self.file, "isatty") and self.file.isatty()
        self._pending_line = False

    def __call__(self, event: str, check_id: str, check_name: str, report: Optional[CheckReport]) -> None:
        if event == "start":
            self.current += 1
            if self._is_tty:
                self._write(f"\r\033[K{self.SYMBOLS['running']} {self._position()} {check_name}")
                self._pending_line = True
        elif event == "complete" and report is not None:
            status = report_status(report)
            self.counts[status] += 1
            self._write(
                f"{self._erase()}[{self.SYMBOLS[status]}] {self._position()} "
                f"{check_name} - {status.upper()}\n"
            )

    def _position(self) -> str:
        return f"Check {self.current}/{self.total}:"

    def _erase(self) -> str:
        if not self._pending_line:
            return ""
        self._pending_line = False
        return "\r\033[K"

    def _write(self, text: str) -> None:
        self.file.write(text)
        self.file.flush()

    def summary(self) -> str:
        """One-line tally of finished checks."""
        return (
            f"{sum(self.counts.values())}/{self.total} checks: "
            f"{self.counts['passed']} passed, {self.counts['failed']} failed, "
            f"{self.counts['degraded']} degraded"
        )

    def close(self) -> None:
        """Write the summary line; nothing is written for an empty scan."""
        if self.total == 0:
            return
        self._write(f"{self._erase()}{self.summary()}\n")

    def __enter__(self) -> "ScanProgress":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
