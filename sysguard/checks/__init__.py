"""
SysGuard - Checks Package

This package contains the hardening check implementations. Each module
holds one check class that inherits from sysguard.core.check.BaseCheck.
"""

# Export base classes for check implementations
from sysguard.core.check import BaseCheck, CheckReport

# Informational checks
from sysguard.checks.host_os import OSCheck
from sysguard.checks.host_ip import IPCheck

# Account checks
from sysguard.checks.user_management import UserManagementCheck
from sysguard.checks.auth_password_complexity import PasswordComplexityCheck
from sysguard.checks.session_timeout import OperationTimeoutCheck

# Network exposure checks
from sysguard.checks.net_high_risk_ports import PortCheck
from sysguard.checks.svc_disabled import ServiceCheck

# Audit and access control checks
from sysguard.checks.audit_logging import AuditCheck
from sysguard.checks.iptables_whitelist import IPTablesCheck
from sysguard.checks.shell_history import CommandHistoryCheck

# Report order of a full scan
ALL_CHECKS = [
    OSCheck,
    IPCheck,
    UserManagementCheck,
    PasswordComplexityCheck,
    OperationTimeoutCheck,
    PortCheck,
    ServiceCheck,
    AuditCheck,
    IPTablesCheck,
    CommandHistoryCheck,
]

__all__ = [
    # Base classes
    "BaseCheck",
    "CheckReport",
    # Checks
    "OSCheck",
    "IPCheck",
    "UserManagementCheck",
    "PasswordComplexityCheck",
    "OperationTimeoutCheck",
    "PortCheck",
    "ServiceCheck",
    "AuditCheck",
    "IPTablesCheck",
    "CommandHistoryCheck",
    "ALL_CHECKS",
]
