"""
SysGuard - Fact Collection

This module provides the fact collector interface used by every check
and its two implementations: the live host collector and a static,
in-memory collector that serves canned facts.

A fact is raw, uninterpreted system state. Collectors never parse what
they return; a fact that cannot be obtained raises CollectionFailure.
"""

from __future__ import annotations

import errno
import shlex
import socket
import subprocess
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

import psutil


CommandLine = Union[str, list[str]]


class CollectionFailure(Exception):
    """A fact source could not be read.

    Attributes:
        source: The failing command line, file path, port or capability
        reason: Human-readable cause
    """

    def __init__(self, source: str, reason: str = "unavailable") -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason

    def to_dict(self) -> dict[str, str]:
        """Convert the failure to a dictionary for JSON serialization."""
        return {"source": self.source, "reason": self.reason}


@dataclass(frozen=True)
class InterfaceAddress:
    """One address bound to a network interface."""

    interface: str
    family: str
    address: str


def _command_source(cmdline: CommandLine) -> str:
    if isinstance(cmdline, str):
        return cmdline
    return " ".join(shlex.quote(part) for part in cmdline)


def _family_to_label(family: object) -> str:
    """Convert a psutil address family into "IPv4", "IPv6" or "MAC"."""
    if family == socket.AF_INET:
        return "IPv4"
    if family == socket.AF_INET6:
        return "IPv6"
    if family == getattr(psutil, "AF_LINK", None):
        return "MAC"
    return str(family)


class FactCollector(ABC):
    """Abstract source of raw host facts.

    Every method returns the fact or raises CollectionFailure. Callers
    decide what a missing fact means.
    """

    @abstractmethod
    def run_command(self, cmdline: CommandLine, timeout: Optional[float] = None) -> str:
        """Run a command and return its standard output.

        The exit status is not interpreted: any process that completed
        and produced output counts as success.
        """

    @abstractmethod
    def read_file(self, path: str) -> str:
        """Return the full contents of a file."""

    @abstractmethod
    def run_shell_builtin(self, name: str, timeout: Optional[float] = None) -> str:
        """Return the output of a shell builtin such as ``umask``."""

    @abstractmethod
    def interface_addresses(self) -> list[InterfaceAddress]:
        """Return every address of every network interface."""

    @abstractmethod
    def can_bind(self, port: int, host: str = "127.0.0.1") -> bool:
        """Try to open a TCP listener on host:port.

        Returns:
            True if the bind succeeded (nothing else holds the port),
            False if the address is already in use
        """


class HostFactCollector(FactCollector):
    """Collects facts from the local host.

    Args:
        default_timeout: Timeout in seconds for commands that do not pass
            their own; None waits indefinitely
        shell: Shell used to evaluate shell builtins
    """

    def __init__(self, default_timeout: Optional[float] = None, shell: str = "bash") -> None:
        self.default_timeout = default_timeout
        self.shell = shell

    def _run(self, command: list[str], source: str, timeout: Optional[float]) -> str:
        if not command:
            raise CollectionFailure(source, "empty command")

        effective_timeout = timeout if timeout is not None else self.default_timeout
        try:
            result = subprocess.run(
                command,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=effective_timeout,
            )
        except subprocess.TimeoutExpired:
            raise CollectionFailure(source, f"timed out after {effective_timeout}s") from None
        except FileNotFoundError:
            raise CollectionFailure(source, "command not found") from None
        except OSError as e:
            raise CollectionFailure(source, str(e)) from e

        return result.stdout or ""

    def run_command(self, cmdline: CommandLine, timeout: Optional[float] = None) -> str:
        source = _command_source(cmdline)
        if isinstance(cmdline, str):
            try:
                command = shlex.split(cmdline)
            except ValueError as e:
                raise CollectionFailure(source, f"cannot parse command line: {e}") from e
        else:
            command = [str(part) for part in cmdline]
        return self._run(command, source, timeout)

    def read_file(self, path: str) -> str:
        try:
            return Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise CollectionFailure(path, e.strerror or str(e)) from e

    def run_shell_builtin(self, name: str, timeout: Optional[float] = None) -> str:
        # Builtins are not executables; ask an interactive shell so the
        # user's rc files apply, as they would for a login session.
        command = [self.shell, "-i", "-c", name]
        return self._run(command, _command_source(command), timeout)

    def interface_addresses(self) -> list[InterfaceAddress]:
        try:
            if_addrs = psutil.net_if_addrs()
        except (OSError, psutil.Error) as e:
            raise CollectionFailure("network interfaces", str(e)) from e

        addresses: list[InterfaceAddress] = []
        for if_name in sorted(if_addrs):
            for entry in if_addrs[if_name]:
                addresses.append(
                    InterfaceAddress(
                        interface=if_name,
                        family=_family_to_label(entry.family),
                        address=str(entry.address).strip(),
                    )
                )
        return addresses

    def can_bind(self, port: int, host: str = "127.0.0.1") -> bool:
        source = f"tcp://{host}:{port}"
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                sock.bind((host, port))
                sock.listen(1)
        except OSError as e:
            if e.errno == errno.EADDRINUSE:
                return False
            raise CollectionFailure(source, e.strerror or str(e)) from e
        return True


class StaticFactCollector(FactCollector):
    """Serves canned facts from memory.

    Anything not supplied raises CollectionFailure, the same way a missing
    file or command would on a real host. Every lookup is counted in
    ``calls`` by source.

    Example:
        collector = StaticFactCollector(
            files={"/etc/profile": "TMOUT=300\\n"},
            commands={"chkconfig --list": ""},
        )
    """

    def __init__(
        self,
        files: Optional[Mapping[str, str]] = None,
        commands: Optional[Mapping[str, str]] = None,
        builtins: Optional[Mapping[str, str]] = None,
        interfaces: Optional[Iterable[InterfaceAddress]] = None,
        occupied_ports: Iterable[int] = (),
        unbindable_ports: Iterable[int] = (),
    ) -> None:
        self.files = dict(files or {})
        self.commands = dict(commands or {})
        self.builtins = dict(builtins or {})
        self.interfaces = list(interfaces) if interfaces is not None else None
        self.occupied_ports = set(occupied_ports)
        self.unbindable_ports = set(unbindable_ports)
        self.calls: Counter[str] = Counter()

    def run_command(self, cmdline: CommandLine, timeout: Optional[float] = None) -> str:
        source = _command_source(cmdline)
        self.calls[source] += 1
        if source not in self.commands:
            raise CollectionFailure(source, "command not available")
        return self.commands[source]

    def read_file(self, path: str) -> str:
        self.calls[path] += 1
        if path not in self.files:
            raise CollectionFailure(path, "No such file or directory")
        return self.files[path]

    def run_shell_builtin(self, name: str, timeout: Optional[float] = None) -> str:
        self.calls[f"builtin:{name}"] += 1
        if name not in self.builtins:
            raise CollectionFailure(name, "shell builtin not available")
        return self.builtins[name]

    def interface_addresses(self) -> list[InterfaceAddress]:
        self.calls["network interfaces"] += 1
        if self.interfaces is None:
            raise CollectionFailure("network interfaces", "not available")
        return list(self.interfaces)

    def can_bind(self, port: int, host: str = "127.0.0.1") -> bool:
        source = f"tcp://{host}:{port}"
        self.calls[source] += 1
        if port in self.unbindable_ports:
            raise CollectionFailure(source, "Permission denied")
        return port not in self.occupied_ports
