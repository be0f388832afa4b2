"""
Eligibility checks applied before a query is aggregated.
"""

import os
import re
from typing import Optional, Sequence

from .types import CallSite

_COMMAND_RE = re.compile(r"^[\s(]*([A-Za-z]+)")


def extract_sql_command(sql: Optional[str]) -> Optional[str]:
    """Return the leading keyword of ``sql`` in upper case."""
    match = _COMMAND_RE.match(sql or "")
    if not match:
        return None
    return match.group(1).upper()


class QueryFilter:
    """Decide whether an executed statement should be tracked."""

    def __init__(self, config=None):
        self.config = config

    @property
    def enabled(self) -> bool:
        return bool(self.config is not None and getattr(self.config, "enabled", False))

    @property
    def tracks_paths(self) -> bool:
        return self.enabled and self.config.tracked_paths is not None

    def accepts(self, sql: Optional[str], paths: Sequence[CallSite] = ()) -> bool:
        if not self.enabled or not sql:
            return False
        if not self.accepts_command(sql):
            return False
        if self.tracks_paths and self.matching_source(paths) is None:
            return False
        return True

    def accepts_command(self, sql: str) -> bool:
        commands = self.config.tracked_sql_command
        if commands is None:
            return True
        return extract_sql_command(sql) in {str(c).upper() for c in commands}

    def matching_source(self, paths: Sequence[CallSite]) -> Optional[CallSite]:
        """First call site under a tracked path, or the first one when unfiltered."""
        if not paths:
            return None
        if not self.tracks_paths:
            return paths[0]
        for call_site in paths:
            filename = os.path.normpath(os.path.abspath(call_site.filename))
            for tracked in self.config.tracked_paths:
                tracked = os.path.abspath(tracked)
                if filename == tracked or filename.startswith(tracked + os.sep):
                    return call_site
        return None
