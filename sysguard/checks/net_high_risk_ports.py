"""
SysGuard Check: High-Risk Ports

Ensures the RPC, NetBIOS, SMB and RDP ports are not in use on this host.
"""

from sysguard.core.check import BaseCheck
from sysguard.core.facts import CollectionFailure, FactCollector
from sysguard.core.findings import Mark, render_marks


class PortCheck(BaseCheck):
    """Check that high-risk TCP ports are closed."""

    id = "port"
    name = "High-Risk Port Closure"
    description = (
        "Probes TCP ports 135, 137, 138, 139, 445 and 3389 on loopback; a port "
        "that cannot be bound is held by a listening service"
    )
    title_key = "A14"
    title = "High-risk port closure"
    keys = ("A14", "B14")

    HIGH_RISK_PORTS = (135, 137, 138, 139, 445, 3389)
    PROBE_HOST = "127.0.0.1"

    def _is_closed(self, collector: FactCollector, port: int) -> bool:
        """Probe one port.

        Returns:
            True if a transient listener could bind the port
        """
        try:
            return collector.can_bind(port, host=self.PROBE_HOST)
        except CollectionFailure as e:
            self.fact_unavailable(e)
            return False

    def evaluate(self, collector: FactCollector) -> dict[str, str]:
        lines = []
        for port in self.HIGH_RISK_PORTS:
            closed = self._is_closed(collector, port)
            lines.append((Mark.from_bool(closed), f"Port {port} is closed"))
        return {"B14": render_marks(lines)}
