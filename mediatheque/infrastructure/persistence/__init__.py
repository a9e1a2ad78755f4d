"""
Persistance du catalogue sous forme de snapshot JSON.

Exports:
- JsonCatalogStorage : implementation de ICatalogStorage
- CatalogSnapshot : modele pydantic du fichier persiste
"""

from mediatheque.infrastructure.persistence.models import CatalogSnapshot
from mediatheque.infrastructure.persistence.snapshot import (
    JsonCatalogStorage,
    catalog_to_snapshot,
    snapshot_to_catalog,
)

__all__ = [
    "CatalogSnapshot",
    "JsonCatalogStorage",
    "catalog_to_snapshot",
    "snapshot_to_catalog",
]
