"""
TrackerSettings implementation.

Settings are resolved in the following order:
1. ``overrides`` passed to ``TrackerSettings.from_django``
2. The ``SQL_TRACKER`` dict in Django settings
3. Library defaults (``LIBRARY_DEFAULTS``)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from django.conf import settings as django_settings

from .defaults import LIBRARY_DEFAULTS, SETTINGS_NAME, merge_settings


def _base_dir() -> Path:
    return Path(getattr(django_settings, "BASE_DIR", None) or os.getcwd())


def _normalize_commands(value: Any) -> Optional[frozenset]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split()
    return frozenset(str(command).strip().upper() for command in value if command)


def _normalize_paths(value: Any) -> Optional[tuple]:
    if value is None:
        return None
    if isinstance(value, (str, Path)):
        value = [value]
    resolved = []
    for entry in value:
        path = Path(entry)
        if not path.is_absolute():
            path = _base_dir() / path
        resolved.append(os.path.normpath(str(path)))
    return tuple(resolved)


@dataclass
class TrackerSettings:
    """Configuration consumed by the query tracker."""

    enabled: bool = False
    tracked_sql_command: Optional[frozenset] = field(
        default_factory=lambda: frozenset({"SELECT", "INSERT", "UPDATE", "DELETE"})
    )
    tracked_paths: Optional[tuple] = None
    output_path: Optional[str] = None
    dump_on_exit: bool = False
    install_on_connect: bool = True

    def __post_init__(self):
        self.tracked_sql_command = _normalize_commands(self.tracked_sql_command)
        self.tracked_paths = _normalize_paths(self.tracked_paths)

    @classmethod
    def from_django(cls, overrides: Optional[dict[str, Any]] = None) -> "TrackerSettings":
        user_settings = getattr(django_settings, SETTINGS_NAME, None) or {}
        merged = merge_settings(LIBRARY_DEFAULTS, user_settings, overrides or {})
        if merged.get("enabled") is None:
            merged["enabled"] = bool(getattr(django_settings, "DEBUG", False))
        valid_fields = set(cls.__dataclass_fields__.keys())
        return cls(**{k: v for k, v in merged.items() if k in valid_fields})

    def get_output_path(self) -> Path:
        """Directory where snapshots are written."""
        if self.output_path:
            return Path(self.output_path)
        return _base_dir() / "tmp" / "sql_tracker"
