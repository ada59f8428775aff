"""
SysGuard Check: Operating System

Records the operating system banner from /etc/issue. Informational only.
"""

from sysguard.core.check import BaseCheck
from sysguard.core.facts import FactCollector


def normalize_issue(text: str) -> str:
    """Collapse an /etc/issue banner onto one line."""
    return text.strip().replace("\r", " ").replace("\n", " ")


class OSCheck(BaseCheck):
    """Record the operating system banner."""

    id = "os"
    name = "Operating System"
    description = "Records the operating system banner from /etc/issue"
    title_key = "A4"
    title = "Operating system"
    keys = ("A4", "B4")

    def evaluate(self, collector: FactCollector) -> dict[str, str]:
        text = self.read_file(collector, self.profile.path("issue"))
        return {"B4": normalize_issue(text) if text is not None else ""}
