"""
Scan orchestration tests.

Runs the full catalogue against canned hosts and checks the merged
finding set.
"""

import sys
from pathlib import Path
from unittest import mock

# Add project root to import path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sysguard.core.catalogue import default_catalogue
from sysguard.core.check import CheckReport
from sysguard.core.facts import HostFactCollector, InterfaceAddress, StaticFactCollector
from sysguard.core.findings import FindingSet
from sysguard.core.profile import ScanProfile, load_profile
from sysguard.core.scanner import collector_for_profile, merge_reports, run_checks, scan


PROFILE = load_profile(profile_id="base")


def hardened_host() -> StaticFactCollector:
    """A host satisfying every checked requirement."""
    audit_rules = "\n".join(
        f"-w {path} -p wa"
        for path in (
            "/etc/passwd", "/etc/shadow", "/etc/sudoers", "/etc/group",
            "/etc/ssh/sshd_config", "/var/log/lastlog", "/etc/profile", "/etc/sysctl.conf",
        )
    )
    return StaticFactCollector(
        files={
            "/etc/issue": "CentOS Linux 7\n",
            "/etc/passwd": "root:x:0:0:root:/root:/sbin/nologin\nops:x:1000:1000::/home/ops:/bin/bash\n",
            "/etc/login.defs": "PASS_MAX_DAYS\t90\nPASS_MIN_LEN\t12\n",
            "/etc/pam.d/system-auth": (
                "password requisite pam_cracklib.so ucredit=-2 lcredit=-1 dcredit=-4 ocredit=-1\n"
            ),
            "/etc/profile": "TMOUT=300\nHISTSIZE=5\nHISTFILESIZE=5\n",
            "/etc/ssh/sshd_config": "Port 2222\nSyslogFacility AUTH\n",
            "/etc/logrotate.conf": "rotate 60\n",
            "/etc/sysconfig/iptables": "-A whitelist -s 10.1.0.0/16 -j ACCEPT\n",
        },
        commands={
            "chkconfig --list": "sshd\t0:off\t1:off\t2:on\t3:on\t4:on\t5:on\t6:off\n",
            "service sshd status": "sshd is running\n",
            "service rsyslog status": "rsyslogd is running\n",
            "service auditd status": "auditd is running\n",
            "auditctl -l": audit_rules,
        },
        builtins={"umask": "0022\n"},
        interfaces=[InterfaceAddress("eth0", "IPv4", "10.1.2.3")],
    )


class TestScan:
    """Tests for the scan entry point."""

    def test_hardened_host_passes_everything(self) -> None:
        reports = run_checks(collector=hardened_host(), profile=PROFILE)

        assert [r.check_id for r in reports] == default_catalogue().get_check_ids()
        assert all(r.passed for r in reports)
        assert not any(r.degraded for r in reports)

    def test_findings_of_hardened_host(self) -> None:
        findings = scan(collector=hardened_host(), profile=PROFILE)

        assert findings["B4"] == "CentOS Linux 7"
        assert findings["B5"] == "10.1.2.3"
        assert findings["C21"] == "10.1.0.0/16"
        assert findings["C15"] == ""

    def test_every_key_present_when_host_is_empty(self) -> None:
        """A host exposing no facts still yields every declared key."""
        findings = scan(collector=StaticFactCollector(), profile=PROFILE)

        assert set(findings) == {key for check_class in default_catalogue() for key in check_class.keys}
        assert findings["A4"] == "Operating system"
        assert findings["B4"] == ""

    def test_scan_is_idempotent(self) -> None:
        collector = hardened_host()
        first = scan(collector=collector, profile=PROFILE)
        second = scan(collector=collector, profile=PROFILE)
        assert first == second

    def test_subset_catalogue(self) -> None:
        catalogue = default_catalogue().subset(["os", "port"])
        findings = scan(catalogue=catalogue, collector=hardened_host(), profile=PROFILE)
        assert set(findings) == {"A4", "B4", "A14", "B14"}

    def test_progress_callback_forwarded(self) -> None:
        callback = mock.MagicMock()
        run_checks(collector=StaticFactCollector(), profile=PROFILE, progress_callback=callback)
        assert callback.call_count == 2 * len(default_catalogue())


class TestMergeReports:
    """Tests for merge_reports."""

    def test_later_report_wins(self) -> None:
        reports = [
            CheckReport("a", "A", findings={"K1": "first", "K2": "x"}),
            CheckReport("b", "B", findings={"K1": "second"}),
        ]
        findings = merge_reports(reports)

        assert isinstance(findings, FindingSet)
        assert findings.to_dict() == {"K1": "second", "K2": "x"}


class TestCollectorForProfile:
    """Tests for collector_for_profile."""

    def test_uses_profile_settings(self) -> None:
        profile = ScanProfile("custom", {"commands": {"timeout": 5, "shell": "sh"}})
        collector = collector_for_profile(profile)

        assert isinstance(collector, HostFactCollector)
        assert collector.default_timeout == 5.0
        assert collector.shell == "sh"

    def test_timeout_override(self) -> None:
        collector = collector_for_profile(PROFILE, timeout=2)
        assert collector.default_timeout == 2

    def test_zero_timeout_disables(self) -> None:
        assert collector_for_profile(PROFILE, timeout=0).default_timeout is None
