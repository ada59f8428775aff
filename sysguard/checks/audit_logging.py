"""
SysGuard Check: Remote Access and System Audit

Checks SSH logging and port, log retention in logrotate, that sshd,
rsyslog and auditd are running, and that auditd watches writes to the
sensitive account, SSH and system configuration files.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from sysguard.core.check import BaseCheck
from sysguard.core.facts import FactCollector
from sysguard.core.findings import Mark, render_marks


# "-w /etc/passwd -p wa -k identity"
_WATCH_RULE = re.compile(r"^-w\s+(\S+)\s+-p\s+(\S+)")

_ACTIVE_PREFIX = "Active:"

DEFAULT_SSH_PORT = "22"
MIN_ROTATE_WEEKS = 54  # about six months with weekly rotation

MONITORED_SERVICES = ("sshd", "rsyslog", "auditd")

SENSITIVE_FILES = (
    "/etc/passwd",
    "/etc/shadow",
    "/etc/sudoers",
    "/etc/group",
    "/etc/ssh/sshd_config",
    "/var/log/lastlog",
    "/etc/profile",
    "/etc/sysctl.conf",
)


@dataclass
class AuditFacts:
    """Facts behind the audit marks, all failing until proven."""
    not_default_ssh_port: bool = False
    ssh_syslog_enabled: bool = False
    retention_ok: bool = False
    running: set[str] = field(default_factory=set)
    watched_files: set[str] = field(default_factory=set)

    @property
    def audit_files_covered(self) -> bool:
        return all(path in self.watched_files for path in SENSITIVE_FILES)


def parse_sshd_config(text: str, facts: AuditFacts) -> None:
    """Look for a non-default Port and SyslogFacility AUTH."""
    for line in text.splitlines():
        line = line.strip()
        tokens = line.split()
        if len(tokens) >= 2 and tokens[0] == "Port" and tokens[1] != DEFAULT_SSH_PORT:
            facts.not_default_ssh_port = True
        if line.startswith("SyslogFacility AUTH"):
            facts.ssh_syslog_enabled = True


def parse_rotate(text: str) -> Optional[int]:
    """Get the value of the first top-level ``rotate N`` directive.

    Returns:
        N, or None if the first directive is missing or not a number
    """
    for line in text.splitlines():
        if line.startswith("rotate "):
            tokens = line.split()
            if len(tokens) >= 2 and tokens[1].lstrip("-").isdigit():
                return int(tokens[1])
            return None
    return None


def status_lines(status_output: str) -> list[str]:
    """Get the lines of ``service <name> status`` output that state the status.

    systemd prints an ``Active:`` line followed by a journal tail; only the
    ``Active:`` line counts there. SysV scripts print the status alone.
    """
    lines = [line.strip() for line in status_output.splitlines() if line.strip()]
    active = [line for line in lines if line.startswith(_ACTIVE_PREFIX)]
    return active or lines


def is_running(status_output: str, running_markers: list[str], not_running_markers: list[str]) -> bool:
    """Decide from ``service <name> status`` output whether a service runs."""
    for line in status_lines(status_output):
        if any(marker in line for marker in not_running_markers):
            continue
        if any(marker in line for marker in running_markers):
            return True
    return False


def parse_watch_rules(output: str) -> set[str]:
    """Get the sensitive files that an ``auditctl -l`` listing watches.

    A file counts when a ``-w`` rule names it with write or attribute
    change permissions.
    """
    watched = set()
    for line in output.splitlines():
        line = line.strip()
        if not line.startswith("-w"):
            continue
        match = _WATCH_RULE.match(line)
        if match is None:
            continue
        path, permissions = match.group(1), match.group(2)
        if path in SENSITIVE_FILES and ("w" in permissions or "a" in permissions):
            watched.add(path)
    return watched


class AuditCheck(BaseCheck):
    """Check remote access hardening and system auditing."""

    id = "audit"
    name = "Remote Access and System Audit"
    description = (
        "Verifies SSH logging and port, six months of log retention, running "
        "sshd/rsyslog/auditd and audit watches on sensitive files"
    )
    title_key = "A19"
    title = "Remote access / system audit / audit content"
    keys = ("A19", "B19")

    def _collect(self, collector: FactCollector) -> AuditFacts:
        facts = AuditFacts()

        sshd_config = self.read_file(collector, self.profile.path("sshd_config"))
        if sshd_config is not None:
            parse_sshd_config(sshd_config, facts)

        logrotate = self.read_file(collector, self.profile.path("logrotate_conf"))
        if logrotate is not None:
            weeks = parse_rotate(logrotate)
            facts.retention_ok = weeks is not None and weeks >= MIN_ROTATE_WEEKS

        for service in MONITORED_SERVICES:
            output = self.run_command(collector, f"service {service} status")
            if output is not None and is_running(
                output,
                self.profile.running_markers,
                self.profile.not_running_markers,
            ):
                facts.running.add(service)

        rules = self.run_command(collector, "auditctl -l")
        if rules is not None:
            facts.watched_files = parse_watch_rules(rules)
            missing = [path for path in SENSITIVE_FILES if path not in facts.watched_files]
            if missing:
                self.logger.info("[%s] no audit watch for: %s", self.id, ", ".join(missing))

        return facts

    def evaluate(self, collector: FactCollector) -> dict[str, str]:
        facts = self._collect(collector)
        return {
            "B19": render_marks([
                (Mark.from_bool("rsyslog" in facts.running), "System log process (syslog) is running"),
                (Mark.from_bool("auditd" in facts.running), "Audit process (auditd) is running"),
                (Mark.from_bool(facts.ssh_syslog_enabled), "SSH log auditing is enabled"),
                (Mark.from_bool(facts.retention_ok), "Audit records are kept for 6 months"),
                (None, "Audit records are sent to a separate log audit store"),
                (
                    Mark.from_bool(facts.audit_files_covered),
                    "Auditing covers user changes, audit configuration, permission changes "
                    "and important system operations",
                ),
                (Mark.from_bool("sshd" in facts.running), "SSH is enabled"),
                (Mark.from_bool(facts.not_default_ssh_port), "SSH default port is changed"),
            ]),
        }
