"""
Django database instrumentation feeding executed statements to a Handler.
"""

import itertools
import logging
import os
import time
import traceback
from contextlib import contextmanager
from typing import Optional

import django
from django.db import DEFAULT_DB_ALIAS, connections

from .tracking import CallSite, Handler, QueryPayload

logger = logging.getLogger(__name__)

EVENT_NAME = "sql.query"

_IGNORED_DIRS = (
    os.path.dirname(os.path.abspath(django.__file__)) + os.sep,
    os.path.dirname(os.path.abspath(__file__)) + os.sep,
)


def capture_call_sites(stack=None) -> tuple:
    """Innermost-first call sites, without Django or tracker frames."""
    frames = stack if stack is not None else traceback.extract_stack()
    return tuple(
        CallSite.from_value(frame)
        for frame in reversed(frames)
        if not os.path.abspath(frame.filename).startswith(_IGNORED_DIRS)
    )


class QueryTrackerWrapper:
    """``connection.execute_wrapper`` callable reporting to a Handler."""

    def __init__(self, handler: Handler):
        self.handler = handler
        self._ids = itertools.count(1)

    def __call__(self, execute, sql, params, many, context):
        started_at = time.perf_counter()
        try:
            return execute(sql, params, many, context)
        finally:
            finished_at = time.perf_counter()
            self._report(sql, params, many, context, started_at, finished_at)

    def _report(self, sql, params, many, context, started_at, finished_at) -> None:
        try:
            connection = (context or {}).get("connection")
            payload = QueryPayload(
                sql=sql if isinstance(sql, str) else None,
                params=params,
                many=bool(many),
                alias=getattr(connection, "alias", None),
                paths=capture_call_sites() if self.handler.tracks_paths else (),
            )
            self.handler.call(
                EVENT_NAME, started_at, finished_at, next(self._ids), payload
            )
        except Exception:
            logger.warning("Failed to report query to tracker", exc_info=True)


def _find_wrapper(handler: Handler, connection) -> Optional[QueryTrackerWrapper]:
    for wrapper in connection.execute_wrappers:
        if isinstance(wrapper, QueryTrackerWrapper) and wrapper.handler is handler:
            return wrapper
    return None


def is_installed(handler: Handler, connection) -> bool:
    return _find_wrapper(handler, connection) is not None


def install(handler: Handler, connection) -> QueryTrackerWrapper:
    """Attach a tracker wrapper for ``handler`` to ``connection`` once."""
    wrapper = _find_wrapper(handler, connection)
    if wrapper is not None:
        return wrapper
    wrapper = QueryTrackerWrapper(handler)
    connection.execute_wrappers.append(wrapper)
    logger.debug("Query tracker installed on connection '%s'", connection.alias)
    return wrapper


def uninstall(handler: Handler, connection) -> None:
    connection.execute_wrappers[:] = [
        wrapper
        for wrapper in connection.execute_wrappers
        if not (isinstance(wrapper, QueryTrackerWrapper) and wrapper.handler is handler)
    ]


@contextmanager
def track_queries(handler: Optional[Handler] = None, using: str = DEFAULT_DB_ALIAS):
    """
    Track queries run on ``using`` inside the block.

    Without an explicit handler the application's handler is used.

    Example:
        with track_queries() as handler:
            User.objects.count()
        handler.data
    """
    if handler is None:
        from .apps import get_handler

        handler = get_handler()
    connection = connections[using]
    if is_installed(handler, connection):
        yield handler
        return
    with connection.execute_wrapper(QueryTrackerWrapper(handler)):
        yield handler
