"""
SysGuard - Base Check Class

This module provides the abstract base class for all hardening checks
and the CheckReport dataclass recording what one check produced.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, TYPE_CHECKING

from .facts import CollectionFailure, FactCollector
from .findings import count_marks

if TYPE_CHECKING:
    from .profile import ScanProfile


class CatalogueError(ValueError):
    """The check catalogue or a check definition is inconsistent.

    This is a programming error, never a runtime condition of the host.
    """


@dataclass
class CheckReport:
    """Outcome of one check execution.

    Attributes:
        check_id: Unique identifier for the check
        check_name: Human-readable name of the check
        findings: Report-location key -> rendered text, every declared key
        failures: Facts that could not be collected
        error: Message of an unexpected evaluator error, if any
    """
    check_id: str
    check_name: str
    findings: dict[str, str] = field(default_factory=dict)
    failures: list[CollectionFailure] = field(default_factory=list)
    error: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the report after initialization."""
        if not self.check_id:
            raise ValueError("check_id cannot be empty")
        if not self.check_name:
            raise ValueError("check_name cannot be empty")

    @property
    def degraded(self) -> bool:
        """True if facts were missing or the evaluator failed."""
        return bool(self.failures) or self.error is not None

    @property
    def mark_counts(self) -> tuple[int, int]:
        """Passed and failed marks across all findings."""
        passed = failed = 0
        for text in self.findings.values():
            p, f = count_marks(text)
            passed += p
            failed += f
        return passed, failed

    @property
    def passed(self) -> bool:
        """True if no finding of this check carries a failed mark."""
        return self.mark_counts[1] == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert the report to a dictionary for JSON serialization.

        Returns:
            Dictionary representation of the check report
        """
        return {
            "id": self.check_id,
            "name": self.check_name,
            "findings": dict(self.findings),
            "failures": [failure.to_dict() for failure in self.failures],
            "error": self.error,
        }


class BaseCheck(ABC):
    """Abstract base class for all hardening checks.

    Every check declares the report-location keys it owns and implements
    evaluate(), a function from collected facts to a fragment of the
    finding set.

    Example:
        class TimeoutCheck(BaseCheck):
            id = "operation_timeout"
            name = "Operation Timeout"
            description = "Checks that idle shells are logged out"
            title_key = "A11"
            title = "Idle session timeout lock"
            keys = ("A11", "B11")

            def evaluate(self, collector):
                text = self.read_file(collector, self.profile.path("profile"))
                ...
                return {"B11": render_marks([(mark, "...")])}
    """

    # Check metadata - must be overridden by subclasses
    id: str = ""  # Unique identifier (e.g., "passwd_complexity")
    name: str = ""  # Human-readable name
    description: str = ""  # What this check does
    title_key: str = ""  # Key holding the section title
    title: str = ""  # Section title written to title_key
    keys: tuple[str, ...] = ()  # Every report key owned, title_key included

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Validate that subclasses define required attributes."""
        super().__init_subclass__(**kwargs)

        if not cls.id:
            raise CatalogueError(f"Check class {cls.__name__} must define 'id'")
        if not cls.name:
            raise CatalogueError(f"Check class {cls.__name__} must define 'name'")
        if not cls.description:
            raise CatalogueError(f"Check class {cls.__name__} must define 'description'")
        if not cls.keys:
            raise CatalogueError(f"Check class {cls.__name__} must define 'keys'")

        if not cls.id.replace("_", "").isalnum() or not cls.id.islower():
            raise CatalogueError(
                f"Check id '{cls.id}' must be lowercase alphanumeric with underscores only"
            )
        if len(set(cls.keys)) != len(cls.keys):
            raise CatalogueError(f"Check '{cls.id}' declares a report key twice")
        if cls.title_key and cls.title_key not in cls.keys:
            raise CatalogueError(
                f"Check '{cls.id}' title key '{cls.title_key}' is not among its keys"
            )

    def __init__(
        self,
        profile: Optional["ScanProfile"] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the check.

        Args:
            profile: Scan profile with paths, keywords and timeouts
            logger: Logger for fact failures (default: sysguard.checks.<id>)
        """
        self._profile = profile
        self.logger = logger or logging.getLogger(f"sysguard.checks.{self.id}")
        self.failures: list[CollectionFailure] = []

    @property
    def profile(self) -> "ScanProfile":
        """Get the active scan profile, loading the default lazily."""
        if self._profile is None:
            from .profile import get_profile

            self._profile = get_profile()
        return self._profile

    def fact_unavailable(self, failure: CollectionFailure) -> None:
        """Record a fact that could not be collected.

        The caller falls back to the rule's default and carries on.
        """
        self.failures.append(failure)
        self.logger.warning(
            "[%s] fact unavailable: %s (%s)", self.id, failure.source, failure.reason
        )

    def read_file(self, collector: FactCollector, path: str) -> Optional[str]:
        """Read a file, returning None and recording the failure if unavailable."""
        try:
            return collector.read_file(path)
        except CollectionFailure as e:
            self.fact_unavailable(e)
            return None

    def run_command(self, collector: FactCollector, cmdline: str) -> Optional[str]:
        """Run a command, returning None and recording the failure if unavailable."""
        try:
            return collector.run_command(cmdline)
        except CollectionFailure as e:
            self.fact_unavailable(e)
            return None

    @abstractmethod
    def evaluate(self, collector: FactCollector) -> dict[str, str]:
        """Evaluate the rule against collected facts.

        This method must be implemented by all check subclasses. The title
        key is filled in by execute() and need not be returned.

        Returns:
            Fragment mapping report-location keys to rendered text
        """
        pass

    def default_fragment(self) -> dict[str, str]:
        """Fragment with every declared key, title set and the rest empty."""
        fragment = {key: "" for key in self.keys}
        if self.title_key:
            fragment[self.title_key] = self.title
        return fragment

    def execute(self, collector: FactCollector) -> CheckReport:
        """Execute the check and normalize its fragment.

        This is the main entry point for running a check. It guarantees
        that exactly the declared keys are present in the report.

        Returns:
            CheckReport for this check

        Raises:
            CatalogueError: If evaluate() produced an undeclared key
        """
        self.failures = []
        findings = self.default_fragment()
        error = None

        try:
            fragment = self.evaluate(collector)
        except Exception as e:
            self.logger.exception("[%s] check evaluation failed", self.id)
            fragment = {}
            error = f"{type(e).__name__}: {e}"

        stray = sorted(set(fragment) - set(self.keys))
        if stray:
            raise CatalogueError(
                f"Check '{self.id}' produced undeclared report keys: {', '.join(stray)}"
            )
        findings.update(fragment)

        return CheckReport(
            check_id=self.id,
            check_name=self.name,
            findings=findings,
            failures=list(self.failures),
            error=error,
        )
