"""
SysGuard - Core Module

This module contains the compliance evaluation engine: fact collection,
the check base class and catalogue, findings and scan orchestration.
"""

from .facts import (
    CollectionFailure,
    FactCollector,
    HostFactCollector,
    InterfaceAddress,
    StaticFactCollector,
)
from .findings import (
    FindingSet,
    FindingSetBuilder,
    Mark,
    count_marks,
    render_marks,
)
from .check import (
    BaseCheck,
    CatalogueError,
    CheckReport,
)
from .catalogue import (
    Catalogue,
    default_catalogue,
)
from .profile import (
    ScanProfile,
    get_profile,
    list_available_profiles,
    load_profile,
    profile_exists,
)
from .scanner import (
    collector_for_profile,
    merge_reports,
    run_checks,
    scan,
)

__all__ = [
    "CollectionFailure",
    "FactCollector",
    "HostFactCollector",
    "InterfaceAddress",
    "StaticFactCollector",
    "FindingSet",
    "FindingSetBuilder",
    "Mark",
    "count_marks",
    "render_marks",
    "BaseCheck",
    "CatalogueError",
    "CheckReport",
    "Catalogue",
    "default_catalogue",
    "ScanProfile",
    "get_profile",
    "list_available_profiles",
    "load_profile",
    "profile_exists",
    "collector_for_profile",
    "merge_reports",
    "run_checks",
    "scan",
]
