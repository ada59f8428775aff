"""
SysGuard Check: Terminal Access Range

Dumps the address ranges allowed by the ``whitelist`` chain of the saved
iptables rules. Informational only.
"""

import re

from sysguard.core.check import BaseCheck
from sysguard.core.facts import FactCollector


_CIDR_PATTERN = re.compile(r"\b(\d{1,3}(?:\.\d{1,3}){3}(?:/\d{1,2})?)")

WHITELIST_PREFIX = "-A whitelist"


def whitelist_ranges(rules_text: str) -> list[str]:
    """Collect the first address range of every whitelist rule."""
    ranges = []
    for line in rules_text.splitlines():
        if not line.startswith(WHITELIST_PREFIX):
            continue
        match = _CIDR_PATTERN.search(line)
        if match:
            ranges.append(match.group(1))
    return ranges


class IPTablesCheck(BaseCheck):
    """Record the iptables access whitelist."""

    id = "iptables"
    name = "Terminal Access Range"
    description = "Lists the address ranges of the iptables whitelist chain"
    title_key = "A21"
    title = "Terminal access method and network address range"
    keys = ("A21", "C21")

    def evaluate(self, collector: FactCollector) -> dict[str, str]:
        text = self.read_file(collector, self.profile.path("iptables"))
        ranges = whitelist_ranges(text) if text is not None else []
        return {"C21": ";".join(ranges)}
