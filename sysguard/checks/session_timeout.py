"""
SysGuard Check: Operation Timeout

Ensures idle login shells are terminated after 600 seconds or less via
TMOUT in /etc/profile.
"""

import re
from typing import Optional

from sysguard.core.check import BaseCheck
from sysguard.core.facts import FactCollector
from sysguard.core.findings import Mark, render_marks


_TMOUT_PATTERN = re.compile(r"\bTMOUT=(\d+)")

MAX_TIMEOUT = 600  # seconds


def find_tmout(profile_text: str) -> Optional[int]:
    """Get the effective TMOUT value of a profile script.

    Lines are scanned from the end of the file, so the last assignment
    wins. Comment lines are ignored.
    """
    for line in reversed(profile_text.splitlines()):
        line = line.strip()
        if line.startswith("#"):
            continue
        match = _TMOUT_PATTERN.search(line)
        if match:
            return int(match.group(1))
    return None


class OperationTimeoutCheck(BaseCheck):
    """Check the shell idle timeout."""

    id = "operation_timeout"
    name = "Operation Timeout"
    description = "Verifies TMOUT in /etc/profile is set to 600 seconds or less"
    title_key = "A11"
    title = "Idle session timeout lock"
    keys = ("A11", "B11")

    def evaluate(self, collector: FactCollector) -> dict[str, str]:
        tmout = None
        text = self.read_file(collector, self.profile.path("profile"))
        if text is not None:
            tmout = find_tmout(text)

        passed = tmout is not None and tmout <= MAX_TIMEOUT
        return {
            "B11": render_marks([
                (Mark.from_bool(passed), "Operation timeout is 10 minutes or less"),
            ]),
        }
