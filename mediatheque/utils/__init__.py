"""
Utilitaires et constantes pour Mediatheque.
"""

from mediatheque.utils.constants import (
    POSTERS_DIRNAME,
    RECENTLY_ADDED_DAYS,
    SNAPSHOT_FILENAME,
    SUPPORTED_EXTENSIONS,
    WATCHED_EPSILON,
)
from mediatheque.utils.helpers import clean_title, normalize_path, strip_invisible_chars

__all__ = [
    "POSTERS_DIRNAME",
    "RECENTLY_ADDED_DAYS",
    "SNAPSHOT_FILENAME",
    "SUPPORTED_EXTENSIONS",
    "WATCHED_EPSILON",
    "clean_title",
    "normalize_path",
    "strip_invisible_chars",
]
