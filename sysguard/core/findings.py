"""
SysGuard - Marks and Finding Sets

This module provides the pass/fail Mark, helpers that render marks into
report text, and the FindingSet that maps report-location keys to the
rendered text of a scan.
"""

import re
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Optional


class Mark(Enum):
    """Binary compliance symbol attached to a rule.

    Attributes:
        PASS: The rule is satisfied
        FAIL: The rule is not satisfied, or could not be verified
    """
    PASS = "✓"
    FAIL = "✗"

    @classmethod
    def from_bool(cls, value: bool) -> "Mark":
        """Map True to PASS and False to FAIL."""
        return cls.PASS if value else cls.FAIL

    @property
    def symbol(self) -> str:
        return self.value


# Requirements the scanner cannot verify are rendered with a blank box.
UNCHECKED = "  "

_MARK_LINE = re.compile(r"^\[(✓|✗|  )\]", re.MULTILINE)


def render_mark(mark: Optional[Mark], description: str) -> str:
    """Render one ``[mark] description`` line.

    Args:
        mark: The mark, or None for a requirement that is not checked
        description: Requirement text

    Returns:
        The rendered line
    """
    symbol = mark.symbol if mark is not None else UNCHECKED
    return f"[{symbol}] {description}"


def render_marks(lines: list[tuple[Optional[Mark], str]]) -> str:
    """Render several mark lines into one finding, newline separated."""
    return "\n".join(render_mark(mark, description) for mark, description in lines)


def count_marks(text: str) -> tuple[int, int]:
    """Count passed and failed marks in rendered finding text.

    Returns:
        Tuple of (passed, failed)
    """
    passed = failed = 0
    for match in _MARK_LINE.finditer(text):
        if match.group(1) == Mark.PASS.symbol:
            passed += 1
        elif match.group(1) == Mark.FAIL.symbol:
            failed += 1
    return passed, failed


class FindingSet(Mapping):
    """Immutable result of a scan: report-location key -> finding text.

    Keys are opaque identifiers owned by the checks of the catalogue.
    Lookups of keys that were never populated return an empty string.
    """

    def __init__(self, findings: Optional[Mapping[str, str]] = None) -> None:
        self._findings = MappingProxyType(dict(findings or {}))

    def __getitem__(self, key: str) -> str:
        return self._findings[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._findings)

    def __len__(self) -> int:
        return len(self._findings)

    def get(self, key: str, default: str = "") -> str:
        """Get the finding for a key, or ``default`` if never populated."""
        return self._findings.get(key, default)

    def to_dict(self) -> dict[str, str]:
        """Return a plain dictionary copy sorted by key."""
        return {key: self._findings[key] for key in sorted(self._findings)}

    def __repr__(self) -> str:
        return f"FindingSet({self.to_dict()!r})"


class FindingSetBuilder:
    """Accumulates check fragments during a scan.

    Example:
        builder = FindingSetBuilder()
        builder.merge({"A4": "Operating system", "B4": "CentOS 7"})
        findings = builder.freeze()
    """

    def __init__(self) -> None:
        self._findings: dict[str, str] = {}

    def add(self, key: str, text: str) -> None:
        """Set one key; a later write to the same key wins."""
        self._findings[key] = text

    def merge(self, fragment: Mapping[str, str]) -> None:
        """Merge a check's fragment; later writers win on collision."""
        for key, text in fragment.items():
            self.add(key, text)

    def freeze(self) -> FindingSet:
        """Return an immutable snapshot of everything merged so far."""
        return FindingSet(self._findings)

    def __len__(self) -> int:
        return len(self._findings)
