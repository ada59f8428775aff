"""
SysGuard - Scan Orchestration

Runs every check of a catalogue, one at a time, and merges their
fragments into a single FindingSet.
"""

import logging
from typing import Optional

from .catalogue import Catalogue, ProgressCallback, default_catalogue
from .check import CheckReport
from .facts import FactCollector, HostFactCollector
from .findings import FindingSet, FindingSetBuilder
from .profile import ScanProfile, get_profile


logger = logging.getLogger(__name__)


def collector_for_profile(profile: ScanProfile, timeout: Optional[float] = None) -> HostFactCollector:
    """Build a host collector using the profile's timeout and shell.

    Args:
        profile: Active scan profile
        timeout: Command timeout overriding the profile's; 0 or less disables it
    """
    if timeout is None:
        timeout = profile.command_timeout
    elif timeout <= 0:
        timeout = None
    return HostFactCollector(
        default_timeout=timeout,
        shell=profile.shell,
    )


def run_checks(
    catalogue: Optional[Catalogue] = None,
    collector: Optional[FactCollector] = None,
    profile: Optional[ScanProfile] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> list[CheckReport]:
    """Run every check and return the per-check reports.

    Args:
        catalogue: Checks to run (default: the full catalogue)
        collector: Fact source (default: the local host)
        profile: Scan profile (default: detected from the environment)
        progress_callback: See Catalogue.run_all

    Returns:
        List of CheckReport objects in catalogue order
    """
    profile = profile or get_profile()
    catalogue = catalogue if catalogue is not None else default_catalogue()
    collector = collector or collector_for_profile(profile)

    logger.info("Scanning %d checks with profile '%s'", len(catalogue), profile.profile_id)
    reports = catalogue.run_all(
        collector,
        profile=profile,
        progress_callback=progress_callback,
    )

    unavailable = sum(len(report.failures) for report in reports)
    if unavailable:
        logger.info("Scan finished with %d unavailable fact(s)", unavailable)
    return reports


def merge_reports(reports: list[CheckReport]) -> FindingSet:
    """Merge check reports into one FindingSet, later reports winning."""
    builder = FindingSetBuilder()
    for report in reports:
        builder.merge(report.findings)
    return builder.freeze()


def scan(
    catalogue: Optional[Catalogue] = None,
    collector: Optional[FactCollector] = None,
    profile: Optional[ScanProfile] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> FindingSet:
    """Run a full scan and return the resulting FindingSet.

    The returned mapping holds every key declared by the catalogue, even
    where the underlying facts were unavailable.
    """
    reports = run_checks(
        catalogue=catalogue,
        collector=collector,
        profile=profile,
        progress_callback=progress_callback,
    )
    return merge_reports(reports)
