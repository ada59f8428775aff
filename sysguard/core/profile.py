"""
Scan profile loading for host-specific paths, wording and timeouts.

This module centralizes host assumptions (where the checked files live,
how long a command may run, which shell evaluates builtins and which
localized words service tools print) behind config-driven JSON profiles.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import os
from pathlib import Path
import threading
from typing import Any, Mapping, Optional


_PROFILES_DIR = Path(__file__).resolve().parent.parent / "profiles"
_BASE_PROFILE = "base"


@dataclass
class ScanProfile:
    """Runtime scan profile with typed accessors."""

    profile_id: str
    data: dict[str, Any]

    def path(self, key: str) -> str:
        """Get the file path configured for a logical key.

        Args:
            key: Logical path key from profile (e.g. "passwd")

        Returns:
            Configured path

        Raises:
            KeyError: If the profile does not define the key
        """
        paths = self.data.get("paths", {})
        if key not in paths:
            raise KeyError(f"Profile '{self.profile_id}' defines no path for '{key}'")
        return str(paths[key])

    @property
    def command_timeout(self) -> Optional[float]:
        """Default command timeout in seconds, None for no timeout."""
        value = self.data.get("commands", {}).get("timeout")
        if value is None:
            return None
        timeout = float(value)
        return timeout if timeout > 0 else None

    @property
    def shell(self) -> str:
        """Shell used to evaluate shell builtins."""
        return str(self.data.get("commands", {}).get("shell", "bash"))

    @property
    def running_markers(self) -> list[str]:
        """Words a service status command prints for a running service."""
        return [str(v) for v in self.data.get("keywords", {}).get("service_running", [])]

    @property
    def not_running_markers(self) -> list[str]:
        """Words that negate a running marker (e.g. "not running")."""
        return [str(v) for v in self.data.get("keywords", {}).get("service_not_running", [])]

    @property
    def runlevel_off(self) -> list[str]:
        """Status words chkconfig prints for a disabled runlevel."""
        value = self.data.get("keywords", {}).get("runlevel_off", ["off"])
        if isinstance(value, str):
            return [value]
        return [str(v) for v in value]


def load_profile(
    profile_id: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ScanProfile:
    """Load a scan profile merged over the base profile.

    Args:
        profile_id: Explicit profile id (e.g., "zh_CN"); detected from the
            locale environment when omitted
        environ: Environment used for locale detection (default: os.environ)

    Returns:
        ScanProfile instance

    Raises:
        ValueError: If an explicit profile id does not exist
    """
    if profile_id:
        if not profile_exists(profile_id):
            available = ", ".join(list_available_profiles(include_base=True))
            raise ValueError(
                f"Unknown scan profile '{profile_id}'. "
                f"Available profiles: {available}"
            )
        selected_id = profile_id
    else:
        selected_id = _select_profile_id(os.environ if environ is None else environ)

    merged = _load_profile_file(_BASE_PROFILE)
    if selected_id != _BASE_PROFILE:
        merged = _deep_merge(merged, _load_profile_file(selected_id))

    return ScanProfile(profile_id=selected_id, data=merged)


_DEFAULT_PROFILE: Optional[ScanProfile] = None
_LOCK = threading.Lock()


def list_available_profiles(include_base: bool = False) -> list[str]:
    """List available profile IDs from the profile directory.

    Args:
        include_base: Whether to include the base profile

    Returns:
        Sorted list of profile identifiers
    """
    if not _PROFILES_DIR.exists():
        return []

    profiles: list[str] = []
    for path in _PROFILES_DIR.glob("*.json"):
        if path.stem == _BASE_PROFILE and not include_base:
            continue
        profiles.append(path.stem)

    return sorted(profiles)


def profile_exists(profile_id: str) -> bool:
    """Check whether a profile file exists."""
    if not profile_id:
        return False
    return (_PROFILES_DIR / f"{profile_id}.json").exists()


def get_profile(
    profile_id: Optional[str] = None,
    refresh: bool = False,
) -> ScanProfile:
    """Get the cached default profile.

    Args:
        profile_id: Optional explicit profile id. If provided, bypasses cache.
        refresh: Reload the cached default profile

    Returns:
        ScanProfile
    """
    global _DEFAULT_PROFILE

    if profile_id:
        return load_profile(profile_id=profile_id)

    with _LOCK:
        if refresh or _DEFAULT_PROFILE is None:
            _DEFAULT_PROFILE = load_profile()
        return _DEFAULT_PROFILE


def _select_profile_id(environ: Mapping[str, str]) -> str:
    """Select the best profile id from the locale environment."""
    locale_name = ""
    for var in ("LC_ALL", "LC_MESSAGES", "LANG"):
        value = str(environ.get(var, "")).strip()
        if value:
            locale_name = value
            break

    # zh_CN.UTF-8@euro -> zh_CN
    locale_name = locale_name.split(".", 1)[0].split("@", 1)[0]
    if not locale_name or locale_name in ("C", "POSIX"):
        return _BASE_PROFILE

    candidates = [locale_name]
    language = locale_name.split("_", 1)[0]
    if language and language != locale_name:
        candidates.append(language)

    for candidate in candidates:
        if candidate != _BASE_PROFILE and profile_exists(candidate):
            return candidate

    return _BASE_PROFILE


def _load_profile_file(profile_id: str) -> dict[str, Any]:
    """Load a profile JSON file by id."""
    path = _PROFILES_DIR / f"{profile_id}.json"
    if not path.exists():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return {}

    return {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two dictionaries."""
    merged: dict[str, Any] = dict(base)

    for key, value in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(value, dict)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value

    return merged
