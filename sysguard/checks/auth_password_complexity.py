"""
SysGuard Check: Password Complexity

Checks minimum password length and maximum password age in
/etc/login.defs, and the pam_cracklib character-class credits in
/etc/pam.d/system-auth.
"""

import re
from dataclasses import dataclass
from typing import Optional

from sysguard.core.check import BaseCheck
from sysguard.core.facts import FactCollector
from sysguard.core.findings import Mark, render_marks


_CREDIT_PATTERN = re.compile(r"\b([dulo]credit)\s*=\s*(-?\d+)")

MIN_LENGTH = 8
MAX_AGE_DAYS = 180

# A credit of -N demands at least N characters of that class.
REQUIRED_CREDITS = {
    "ucredit": -2,
    "lcredit": -1,
    "dcredit": -4,
    "ocredit": -1,
}


@dataclass
class PasswordPolicy:
    """Password policy facts, holding the rule defaults until parsed."""
    minimum_length: int = 0
    strong_combination: bool = False
    max_age_days: int = 99999


def _login_defs_value(line: str) -> Optional[int]:
    """Get the numeric value of a tab-separated login.defs line."""
    tokens = [token.strip() for token in line.split("\t") if token.strip()]
    if len(tokens) < 2 or not tokens[1].isdigit():
        return None
    return int(tokens[1])


def parse_login_defs(text: str, policy: PasswordPolicy) -> None:
    """Update policy from PASS_MIN_LEN and PASS_MAX_DAYS; later lines win."""
    for line in text.strip().splitlines():
        if line.startswith("PASS_MIN_LEN"):
            value = _login_defs_value(line)
            if value is not None:
                policy.minimum_length = value
        elif line.startswith("PASS_MAX_DAYS"):
            value = _login_defs_value(line)
            if value is not None:
                policy.max_age_days = value


def find_cracklib_line(text: str) -> Optional[str]:
    """Find the first ``password requisite pam_cracklib`` line."""
    for line in text.strip().splitlines():
        tokens = line.split()
        if len(tokens) >= 3 and tokens[0] == "password" and tokens[1] == "requisite" \
                and tokens[2].startswith("pam_cracklib"):
            return line
    return None


def parse_credits(line: str) -> dict[str, int]:
    """Extract the {u,l,d,o}credit values of a pam_cracklib line."""
    return {name: int(value) for name, value in _CREDIT_PATTERN.findall(line)}


def is_strong_combination(credits: dict[str, int]) -> bool:
    """True if every credit demands at least the required characters.

    An absent credit counts as 0 and therefore fails.
    """
    return all(credits.get(name, 0) <= limit for name, limit in REQUIRED_CREDITS.items())


class PasswordComplexityCheck(BaseCheck):
    """Check password length, character mix and rotation."""

    id = "passwd_complexity"
    name = "Password Complexity"
    description = (
        "Verifies password minimum length (8+), pam_cracklib character credits "
        "and a password update cycle of 180 days or less"
    )
    title_key = "A10"
    title = "Password complexity"
    keys = ("A10", "B10")

    def evaluate(self, collector: FactCollector) -> dict[str, str]:
        policy = PasswordPolicy()

        login_defs = self.read_file(collector, self.profile.path("login_defs"))
        if login_defs is not None:
            parse_login_defs(login_defs, policy)

        system_auth = self.read_file(collector, self.profile.path("system_auth"))
        if system_auth is not None:
            line = find_cracklib_line(system_auth)
            if line is None:
                self.logger.debug("[%s] no pam_cracklib requisite line found", self.id)
            else:
                policy.strong_combination = is_strong_combination(parse_credits(line))

        return {
            "B10": render_marks([
                (Mark.from_bool(policy.minimum_length >= MIN_LENGTH), "Password length is at least 8 characters"),
                (Mark.from_bool(policy.strong_combination), "Passwords mix letters, digits and special characters"),
                (None, "Password differs from the user name"),
                (Mark.from_bool(policy.max_age_days <= MAX_AGE_DAYS), "Password update cycle is 180 days"),
            ]),
        }
