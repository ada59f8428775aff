"""
SysGuard - Check Catalogue

This module provides the ordered catalogue of checks that make up one
scan, and execution of those checks against a fact collector.
"""

import inspect
import logging
from typing import Callable, Iterable, Iterator, Optional, Type, TYPE_CHECKING

from .check import BaseCheck, CatalogueError, CheckReport
from .facts import FactCollector

if TYPE_CHECKING:
    from .profile import ScanProfile


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str, str, Optional[CheckReport]], None]


class Catalogue:
    """Ordered catalogue of check classes.

    Checks run in the order they were registered. Every report-location
    key belongs to exactly one check.

    Example:
        catalogue = Catalogue([OSCheck, IPCheck])
        reports = catalogue.run_all(HostFactCollector())
    """

    def __init__(self, check_classes: Iterable[Type[BaseCheck]] = ()) -> None:
        """Initialize a catalogue, registering the given classes in order."""
        self._checks: dict[str, Type[BaseCheck]] = {}
        self._key_owners: dict[str, str] = {}
        for check_class in check_classes:
            self.register(check_class)

    def register(self, check_class: Type[BaseCheck]) -> None:
        """Append a check class to the catalogue.

        Args:
            check_class: A class that inherits from BaseCheck

        Raises:
            TypeError: If check_class is not a subclass of BaseCheck
            CatalogueError: If the id or one of the report keys is already taken
        """
        if not inspect.isclass(check_class):
            raise TypeError(f"Expected a class, got {type(check_class).__name__}")

        if not issubclass(check_class, BaseCheck):
            raise TypeError(
                f"Check class must inherit from BaseCheck, "
                f"got {check_class.__name__}"
            )

        check_id = check_class.id

        if check_id in self._checks:
            raise CatalogueError(
                f"Check with id '{check_id}' is already registered "
                f"({self._checks[check_id].__name__})"
            )

        for key in check_class.keys:
            if key in self._key_owners:
                raise CatalogueError(
                    f"Report key '{key}' of check '{check_id}' is already owned "
                    f"by check '{self._key_owners[key]}'"
                )

        self._checks[check_id] = check_class
        for key in check_class.keys:
            self._key_owners[key] = check_id

    def get_check(self, check_id: str) -> Optional[Type[BaseCheck]]:
        """Get a registered check class by id, or None."""
        return self._checks.get(check_id)

    def get_check_ids(self) -> list[str]:
        """Get all check ids in catalogue order."""
        return list(self._checks)

    def subset(self, check_ids: Iterable[str]) -> "Catalogue":
        """Build a catalogue holding only the given checks, in catalogue order.

        Raises:
            KeyError: If any check_id is not registered
        """
        wanted = list(check_ids)
        unknown = [cid for cid in wanted if cid not in self._checks]
        if unknown:
            raise KeyError(f"Unknown check id(s): {', '.join(unknown)}")
        return Catalogue(cls for cid, cls in self._checks.items() if cid in wanted)

    def run_all(
        self,
        collector: FactCollector,
        profile: Optional["ScanProfile"] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> list[CheckReport]:
        """Execute every check in catalogue order.

        Args:
            collector: Fact source shared by all checks
            profile: Scan profile passed to every check
            progress_callback: Optional callback called before and after
                each check with (event_type, check_id, check_name, report)
                where event_type is 'start' or 'complete', and report is
                only provided for 'complete' events.

        Returns:
            List of CheckReport objects, one per check
        """
        reports: list[CheckReport] = []

        for check_class in self._checks.values():
            if progress_callback:
                progress_callback("start", check_class.id, check_class.name, None)

            logger.debug("Running check %s", check_class.id)
            report = check_class(profile=profile).execute(collector)
            reports.append(report)

            if progress_callback:
                progress_callback("complete", check_class.id, check_class.name, report)

        return reports

    def __len__(self) -> int:
        """Return the number of registered checks."""
        return len(self._checks)

    def __iter__(self) -> Iterator[Type[BaseCheck]]:
        return iter(self._checks.values())


def default_catalogue() -> Catalogue:
    """Build the catalogue of all checks in report order."""
    from ..checks import ALL_CHECKS

    return Catalogue(ALL_CHECKS)
