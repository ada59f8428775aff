"""
SysGuard Check: Disabled Services

Parses ``chkconfig --list`` and ensures mail, FTP, telnet, rlogin,
NetBIOS, DHCP, SMB, SNMP and remote desktop services are not enabled,
and that no other non-essential service is enabled.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from sysguard.core.check import BaseCheck
from sysguard.core.findings import Mark, render_marks
from sysguard.core.facts import FactCollector


RUNLEVEL_COUNT = 7
# Indexes into the seven runlevel fields that must all be on.
ENABLED_RUNLEVEL_INDEXES = (2, 3, 4, 5)


@dataclass(frozen=True)
class ServiceRunlevels:
    """One chkconfig line: service name and per-runlevel enabled flags."""
    name: str
    runlevels: tuple[bool, ...]

    @property
    def enabled(self) -> bool:
        return all(self.runlevels[i] for i in ENABLED_RUNLEVEL_INDEXES)


@dataclass
class ServiceFacts:
    """Names of services enabled in every multi-user runlevel."""
    enabled: set[str] = field(default_factory=set)

    def any_enabled(self, names: tuple[str, ...]) -> bool:
        return any(name in self.enabled for name in names)


def parse_chkconfig_line(line: str, off_keywords: Sequence[str]) -> Optional[ServiceRunlevels]:
    """Parse one ``chkconfig --list`` line.

    Args:
        line: Tab-separated line: name then seven ``runlevel:status`` fields
        off_keywords: Status words meaning the runlevel is disabled

    Returns:
        ServiceRunlevels, or None if the line does not have eight fields
    """
    items = [item for item in line.split("\t") if item.strip()]
    if len(items) != RUNLEVEL_COUNT + 1:
        return None

    runlevels = []
    for item in items[1:]:
        parts = item.split(":", 1)
        if len(parts) == 2:
            runlevels.append(parts[1].strip() not in off_keywords)
        else:
            runlevels.append(True)
    return ServiceRunlevels(name=items[0].strip(), runlevels=tuple(runlevels))


def parse_chkconfig(output: str, off_keywords: Sequence[str] = ("off",)) -> ServiceFacts:
    """Collect the services enabled in runlevels 3 to 6."""
    facts = ServiceFacts()
    for line in output.splitlines():
        service = parse_chkconfig_line(line, off_keywords)
        if service is not None and service.enabled:
            facts.enabled.add(service.name)
    return facts


class ServiceCheck(BaseCheck):
    """Check that risky and non-essential services are disabled."""

    id = "service"
    name = "Disabled Services"
    description = (
        "Verifies via chkconfig that risky network services and other "
        "non-essential services are not enabled in runlevels 3 to 6"
    )
    title_key = "A15"
    title = "Disabled services"
    keys = ("A15", "B15", "C15")

    # Requirement text -> service names that violate it when enabled
    MAIN_SERVICES: list[tuple[str, tuple[str, ...]]] = [
        ("E-Mail", ("sendmail", "postfix")),
        ("FTP", ("ftp", "vsftpd")),
        ("telnet", ("telnet",)),
        ("rlogin", ("rlogin",)),
        ("NetBIOS", ("netbios",)),
        ("DHCP", ("dhcpd",)),
        ("SMB", ("smb", "samba")),
        ("SNMPv3 and below", ("snmpd",)),
        ("Remote desktop", ("xdmcp", "vncserver")),
    ]

    # Not needed on a minimally installed server
    EXTRA_SERVICES = (
        "bluetooth",
        "rwho",
        "sh",
        "rsh",
        "rexec",
        "sendmail",
        "tftp",
        "http",
        "nfs",
        "smtp",
    )

    def evaluate(self, collector: FactCollector) -> dict[str, str]:
        facts = ServiceFacts()
        output = self.run_command(collector, "chkconfig --list")
        if output is not None:
            facts = parse_chkconfig(output, self.profile.runlevel_off)

        lines: list[tuple[Optional[Mark], str]] = [
            (Mark.from_bool(not facts.any_enabled(names)), label)
            for label, names in self.MAIN_SERVICES
        ]
        extra_enabled = [name for name in self.EXTRA_SERVICES if name in facts.enabled]
        lines.append((Mark.from_bool(not extra_enabled), "Other non-essential services are disabled"))

        remarks = ""
        if extra_enabled:
            remarks = f"The following services are not disabled: {', '.join(extra_enabled)}"

        return {
            "B15": render_marks(lines),
            "C15": remarks,
        }
