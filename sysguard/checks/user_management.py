"""
SysGuard Check: User Management

Verifies the default umask of interactive shells and audits the accounts
in /etc/passwd that can log in, flagging a surviving default root account.
"""

from dataclasses import dataclass, field
from typing import Optional

from sysguard.core.check import BaseCheck
from sysguard.core.facts import CollectionFailure, FactCollector
from sysguard.core.findings import Mark, render_marks


REQUIRED_UMASK = "0022"
NO_LOGIN_SHELLS = ("/nologin", "/false")
DEFAULT_ACCOUNT_PREFIX = "root"


@dataclass
class AccountFacts:
    """Facts behind the user management marks."""
    umask: Optional[str] = None
    login_accounts: list[str] = field(default_factory=list)
    passwd_available: bool = False

    @property
    def umask_ok(self) -> bool:
        return self.umask is not None and self.umask.strip() == REQUIRED_UMASK

    @property
    def default_account_present(self) -> bool:
        return any(
            line.split(":", 1)[0].startswith(DEFAULT_ACCOUNT_PREFIX)
            for line in self.login_accounts
        )


def login_accounts(passwd_text: str) -> list[str]:
    """Filter /etc/passwd down to accounts with an interactive shell.

    Blank lines, comments and accounts whose shell ends in /nologin or
    /false are dropped. Retained lines are returned verbatim.
    """
    accounts = []
    for line in passwd_text.strip().splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.endswith(NO_LOGIN_SHELLS):
            continue
        accounts.append(line)
    return accounts


class UserManagementCheck(BaseCheck):
    """Check umask and login-capable accounts."""

    id = "user_mgmt"
    name = "User Management"
    description = (
        "Verifies the interactive shell umask is 0022, lists accounts that can "
        "log in and checks that no default root account keeps a login shell"
    )
    title_key = "A8"
    title = "User management"
    keys = ("A8", "B8", "B9", "C9")

    def _collect(self, collector: FactCollector) -> AccountFacts:
        facts = AccountFacts()

        # umask is a shell builtin, not an executable.
        try:
            facts.umask = collector.run_shell_builtin("umask")
        except CollectionFailure as e:
            self.fact_unavailable(e)

        passwd_text = self.read_file(collector, self.profile.path("passwd"))
        if passwd_text is not None:
            facts.passwd_available = True
            facts.login_accounts = login_accounts(passwd_text)

        return facts

    def evaluate(self, collector: FactCollector) -> dict[str, str]:
        facts = self._collect(collector)

        if facts.umask is not None and not facts.umask_ok:
            self.logger.info("[%s] umask is %r, expected %s", self.id, facts.umask.strip(), REQUIRED_UMASK)

        no_default_account = facts.passwd_available and not facts.default_account_present

        return {
            "B8": render_marks([
                (None, "Expired, unused and hidden accounts are deleted or locked"),
                (Mark.from_bool(facts.umask_ok), "Permissions are set for each user as required (umask 0022)"),
            ]),
            "B9": render_marks([
                (
                    Mark.from_bool(no_default_account),
                    "Default user names such as root, superadmin or administrator are not used",
                ),
            ]),
            "C9": "\n".join(facts.login_accounts),
        }
