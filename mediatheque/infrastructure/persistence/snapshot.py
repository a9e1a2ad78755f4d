"""
Persistance du catalogue dans un snapshot JSON.

Le catalogue est enregistre en un seul fichier (library.json) dans le
repertoire de stockage.

- Chargement : un fichier absent donne un catalogue vide. Un fichier
  illisible ou corrompu donne aussi un catalogue vide, mais il est d'abord
  renomme (ou a defaut copie) a cote (library.json.corrupt-<horodatage>)
  pour ne jamais etre perdu.
- Sauvegarde : ecriture dans un fichier temporaire puis os.replace pour
  que le snapshot precedent reste intact en cas d'echec. Tout echec leve
  SnapshotSaveError.
"""

import os
import shutil
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from mediatheque.core.exceptions import SnapshotSaveError
from mediatheque.core.ports.storage import ICatalogStorage
from mediatheque.infrastructure.persistence.models import (
    CatalogSnapshot,
    CollectionModel,
    media_to_model,
)
from mediatheque.services.catalog import Catalog
from mediatheque.utils.constants import SNAPSHOT_FILENAME


def catalog_to_snapshot(catalog: Catalog) -> CatalogSnapshot:
    return CatalogSnapshot(
        media={media_id: media_to_model(media) for media_id, media in catalog.items()},
        next_id=catalog.next_id,
        collections={
            collection_id: CollectionModel.from_entity(collection)
            for collection_id, collection in catalog.collections()
        },
        next_collection_id=catalog.next_collection_id,
    )


def snapshot_to_catalog(snapshot: CatalogSnapshot) -> Catalog:
    media, next_id, collections, next_collection_id = snapshot.to_parts()
    return Catalog(
        media=media,
        next_id=next_id,
        collections=collections,
        next_collection_id=next_collection_id,
    )


class JsonCatalogStorage(ICatalogStorage):
    """
    Stockage du catalogue dans un fichier JSON.

    Example:
        storage = JsonCatalogStorage(Path("~/.local/share/mediatheque"))
        catalog = storage.load()
        ...
        storage.save(catalog)
    """

    def __init__(self, storage_dir: Path, filename: str = SNAPSHOT_FILENAME) -> None:
        """
        Initialise le stockage.

        Args:
            storage_dir: Repertoire de stockage (cree a la premiere sauvegarde)
            filename: Nom du fichier snapshot
        """
        self._storage_dir = Path(storage_dir).expanduser()
        self._filename = filename

    @property
    def path(self) -> Path:
        return self._storage_dir / self._filename

    def load(self) -> Catalog:
        """Charge le catalogue ; ne leve jamais."""
        path = self.path
        if not path.exists():
            logger.info(f"Aucun catalogue existant ({path}), demarrage a vide")
            return Catalog()

        try:
            snapshot = CatalogSnapshot.model_validate_json(path.read_bytes())
        except (OSError, ValueError, ValidationError) as e:
            backup = self._backup_unreadable(path)
            logger.warning(
                f"Catalogue illisible {path}: {e}. "
                f"Demarrage a vide, fichier conserve dans {backup}"
            )
            return Catalog()

        catalog = snapshot_to_catalog(snapshot)
        logger.debug(f"Catalogue charge: {len(catalog)} media(s)")
        return catalog

    def _backup_unreadable(self, path: Path) -> Optional[Path]:
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        backup = path.with_name(f"{path.name}.corrupt-{stamp}")
        suffix = 1
        while backup.exists():
            backup = path.with_name(f"{path.name}.corrupt-{stamp}-{suffix}")
            suffix += 1
        try:
            os.replace(path, backup)
        except OSError as e:
            logger.warning(f"Deplacement impossible de {path} ({e}), copie a la place")
            try:
                shutil.copy2(path, backup)
            except OSError as copy_error:
                logger.error(f"Impossible de sauvegarder le catalogue illisible {path}: {copy_error}")
                return None
        return backup

    def save(self, catalog: Catalog) -> None:
        """
        Enregistre le catalogue de maniere atomique.

        Raises:
            SnapshotSaveError: Si l'ecriture echoue
        """
        path = self.path
        temp = path.with_name(f".tmp_{uuid.uuid4().hex}_{path.name}")
        try:
            payload = catalog_to_snapshot(catalog).model_dump_json()
            path.parent.mkdir(parents=True, exist_ok=True)
            temp.write_text(payload, encoding="utf-8")
            os.replace(temp, path)
        except (OSError, ValueError) as e:
            if temp.exists():
                temp.unlink()
            raise SnapshotSaveError(path, str(e)) from e
        logger.debug(f"Catalogue enregistre: {path}")
