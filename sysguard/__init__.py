"""
SysGuard

A read-only security hardening inspector for Linux hosts. Evaluates a
fixed catalogue of rules (password policy, open ports, exposed services,
audit logging, access control) and reports a pass/fail mark per rule,
keyed by report location.
"""

__version__ = "1.0.0"
__author__ = "SysGuard Project"

from .core.facts import CollectionFailure, FactCollector, HostFactCollector, StaticFactCollector
from .core.findings import FindingSet, Mark
from .core.catalogue import Catalogue, default_catalogue
from .core.check import CatalogueError
from .core.scanner import scan

__all__ = [
    "CollectionFailure",
    "FactCollector",
    "HostFactCollector",
    "StaticFactCollector",
    "FindingSet",
    "Mark",
    "Catalogue",
    "default_catalogue",
    "CatalogueError",
    "scan",
]
