"""
django-sql-tracker: aggregate executed SQL statements by fingerprint.
"""

from .defaults import LIBRARY_VERSION
from .normalizer import PLACEHOLDER, clean_sql_query, fingerprint

__version__ = LIBRARY_VERSION

__all__ = [
    "clean_sql_query",
    "fingerprint",
    "PLACEHOLDER",
    "__version__",
]
