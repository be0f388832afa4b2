"""
Default configuration for django-sql-tracker.

Projects override any of these keys through the ``SQL_TRACKER`` dict in their
Django settings.
"""

from __future__ import annotations

from typing import Any

LIBRARY_VERSION = "0.1.0"
LIBRARY_NAME = "django-sql-tracker"

SETTINGS_NAME = "SQL_TRACKER"


LIBRARY_DEFAULTS: dict[str, Any] = {
    # None follows settings.DEBUG
    "enabled": None,
    # None tracks every command, an empty list tracks nothing
    "tracked_sql_command": ["SELECT", "INSERT", "UPDATE", "DELETE"],
    # None tracks queries from any call site
    "tracked_paths": None,
    # Directory for JSON snapshots, defaults to BASE_DIR/tmp/sql_tracker
    "output_path": None,
    "dump_on_exit": False,
    "install_on_connect": True,
}


def merge_settings(*settings_dicts: dict[str, Any]) -> dict[str, Any]:
    """Merge settings dictionaries, later ones override earlier ones."""
    result: dict[str, Any] = {}
    for settings_dict in settings_dicts:
        if settings_dict:
            result.update(settings_dict)
    return result
