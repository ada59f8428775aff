"""
SysGuard Check: Command History

Ensures the shell command history is effectively disabled: HISTSIZE and
HISTFILESIZE in /etc/profile must both be 5 or less.
"""

import re
from dataclasses import dataclass

from sysguard.core.check import BaseCheck
from sysguard.core.facts import FactCollector
from sysguard.core.findings import Mark, render_marks


_HISTSIZE = re.compile(r"\bHISTSIZE=(\d+)")
_HISTFILESIZE = re.compile(r"\bHISTFILESIZE=(\d+)")

DEFAULT_HISTORY_SIZE = 50000
MAX_HISTORY_SIZE = 5


@dataclass
class HistorySettings:
    histsize: int = DEFAULT_HISTORY_SIZE
    histfilesize: int = DEFAULT_HISTORY_SIZE


def parse_history_settings(text: str) -> HistorySettings:
    """Read HISTSIZE and HISTFILESIZE from a profile; later lines win."""
    settings = HistorySettings()
    for line in text.splitlines():
        if line.strip().startswith("#"):
            continue
        match = _HISTSIZE.search(line)
        if match:
            settings.histsize = int(match.group(1))
        match = _HISTFILESIZE.search(line)
        if match:
            settings.histfilesize = int(match.group(1))
    return settings


class CommandHistoryCheck(BaseCheck):
    """Check shell history size limits."""

    id = "command_history"
    name = "Command History"
    description = "Verifies HISTSIZE and HISTFILESIZE in /etc/profile are 5 or less"
    title_key = "A25"
    title = "Command history"
    keys = ("A25", "B25")

    def evaluate(self, collector: FactCollector) -> dict[str, str]:
        settings = HistorySettings()
        text = self.read_file(collector, self.profile.path("profile"))
        if text is not None:
            settings = parse_history_settings(text)

        passed = settings.histsize <= MAX_HISTORY_SIZE and settings.histfilesize <= MAX_HISTORY_SIZE
        return {
            "B25": render_marks([
                (Mark.from_bool(passed), "System command history is removed"),
            ]),
        }
