"""
Django app configuration for django-sql-tracker.

This module configures:
- The process-wide query tracking handler
- Wrapper installation on every new database connection
- The snapshot dump at interpreter exit
"""

import atexit
import logging
from typing import TYPE_CHECKING, Optional

from django.apps import AppConfig as BaseAppConfig
from django.apps import apps

if TYPE_CHECKING:
    from .tracking import Handler

logger = logging.getLogger(__name__)


class AppConfig(BaseAppConfig):
    """Django app configuration for django-sql-tracker."""

    name = "sql_tracker"
    verbose_name = "SQL Tracker"
    label = "sql_tracker"

    handler = None
    tracker_settings = None

    def ready(self):
        """Build the handler and hook it into database connections."""
        from .settings import TrackerSettings
        from .tracking import Handler

        self.tracker_settings = TrackerSettings.from_django()
        self.handler = Handler(self.tracker_settings)

        if not self.tracker_settings.enabled:
            logger.debug("SQL tracker disabled")
            return

        try:
            if self.tracker_settings.install_on_connect:
                self._setup_connection_signal()
            if self.tracker_settings.dump_on_exit:
                atexit.register(self._dump_on_exit)
            logger.info("SQL tracker initialized")
        except Exception as e:
            logger.error(f"Error initializing SQL tracker: {e}")
            if self._is_debug_mode():
                raise

    def _setup_connection_signal(self):
        from django.db import connections
        from django.db.backends.signals import connection_created

        connection_created.connect(
            self._on_connection_created, dispatch_uid="sql_tracker.install"
        )
        # Connections opened before ready() never send the signal.
        for connection in connections.all(initialized_only=True):
            self._install(connection)

    def _on_connection_created(self, sender, connection, **kwargs):
        self._install(connection)

    def _install(self, connection):
        from .instrumentation import install

        install(self.handler, connection)

    def _dump_on_exit(self):
        from .reporting import dump_snapshot

        if not len(self.handler.aggregator):
            return
        try:
            dump_snapshot(self.handler, self.tracker_settings.get_output_path())
        except Exception as e:
            logger.warning(f"Could not write SQL tracker snapshot: {e}")

    def _is_debug_mode(self):
        from django.conf import settings as django_settings

        return getattr(django_settings, "DEBUG", False)


def get_handler() -> Optional["Handler"]:
    """Return the handler owned by the installed app."""
    return apps.get_app_config("sql_tracker").handler
