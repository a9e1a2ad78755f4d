"""
Service d'orchestration de la mediatheque.

LibraryService est l'unique proprietaire du catalogue : le scan, la purge
et le scraping ne font que produire des donnees, que ce service applique
ensuite au catalogue avant de l'enregistrer.

Cycle de rafraichissement complet :
- Purge des medias dont le fichier a disparu (+ nettoyage des collections)
- Scan des repertoires configures
- Scraping des fichiers non identifies
"""

import asyncio
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from mediatheque.core.entities.collection import Collection
from mediatheque.core.entities.media import (
    CollectionId,
    Media,
    MediaId,
    Uncategorised,
    Watched,
    get_video,
)
from mediatheque.core.exceptions import UnknownMediaError
from mediatheque.core.ports.scraper import IScraper
from mediatheque.core.ports.storage import ICatalogStorage
from mediatheque.services import collections as collection_ops
from mediatheque.services.catalog import Catalog
from mediatheque.services.purger import purge_media
from mediatheque.services.scanner import scan_directories
from mediatheque.services.scrape import scrape_all
from mediatheque.services.watched import record_progress, set_watched


@dataclass
class RefreshReport:
    """Resume d'un cycle de rafraichissement."""

    removed: list[MediaId] = field(default_factory=list)
    added: list[MediaId] = field(default_factory=list)
    identified: list[MediaId] = field(default_factory=list)
    scrape_skipped: bool = False


class LibraryService:
    """
    Proprietaire unique du catalogue.

    Utilisation typique:
        service = LibraryService(storage, scraper, storage_dir, directories)
        report = await service.refresh()
    """

    def __init__(
        self,
        storage: ICatalogStorage,
        scraper: Optional[IScraper],
        storage_dir: Path,
        directories: Iterable[Path] = (),
        *,
        scrape_timeout: Optional[float] = None,
        scrape_concurrency: int = 4,
        threshold_movies: int = 15,
        threshold_episodes: int = 2,
        catalog: Optional[Catalog] = None,
    ) -> None:
        """
        Initialise le service.

        Args:
            storage: Stockage du catalogue
            scraper: Source de metadonnees (None = scraping desactive)
            storage_dir: Repertoire de stockage (images)
            directories: Repertoires video a scanner
            scrape_timeout: Delai maximum par recherche en secondes
            scrape_concurrency: Nombre maximum de recherches simultanees
            threshold_movies: Minutes restantes sous lesquelles un film est vu
            threshold_episodes: Minutes restantes sous lesquelles un episode est vu
            catalog: Catalogue deja charge (charge depuis storage si None)
        """
        self._storage = storage
        self._scraper = scraper
        self._storage_dir = Path(storage_dir).expanduser()
        self._directories = [Path(directory) for directory in directories]
        self._scrape_timeout = scrape_timeout
        self._scrape_concurrency = scrape_concurrency
        self._threshold_movies = threshold_movies
        self._threshold_episodes = threshold_episodes
        self._catalog = catalog if catalog is not None else storage.load()
        self.scan_cancel = threading.Event()
        self.scrape_cancel = asyncio.Event()

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    def save(self) -> None:
        """Enregistre le catalogue (SnapshotSaveError propagee)."""
        self._storage.save(self._catalog)

    def _leaf_paths(self) -> list[tuple[MediaId, Path]]:
        pairs = []
        for media_id, media in self._catalog.items():
            video = get_video(media)
            if video is not None:
                pairs.append((media_id, video.path))
        return pairs

    def remove_media(self, media_ids: Iterable[MediaId]) -> list[Media]:
        """Retire des medias puis nettoie les collections."""
        removed = []
        for media_id in media_ids:
            media = self._catalog.remove(media_id)
            if media is not None:
                removed.append(media)
        self._catalog.purge_collections()
        return removed

    async def purge(self) -> list[MediaId]:
        """
        Retire du catalogue les medias dont le fichier n'existe plus.

        Returns:
            Identifiants retires
        """
        missing = await purge_media(self._leaf_paths())
        self.remove_media(missing)
        return missing

    async def scan(self) -> list[MediaId]:
        """
        Scanne les repertoires configures et ajoute les nouveaux fichiers.

        Le scan est bloquant : il tourne dans l'executeur par defaut.

        Returns:
            Identifiants des medias ajoutes
        """
        if not self._directories:
            logger.warning("Aucun repertoire video configure, scan ignore")
            return []

        self.scan_cancel.clear()
        known = self._catalog.video_paths()
        loop = asyncio.get_running_loop()
        found = await loop.run_in_executor(
            None,
            lambda: scan_directories(self._directories, known, self.scan_cancel),
        )
        added = self._catalog.extend(found)
        logger.info(f"Scan termine: {len(added)} nouveau(x) fichier(s)")
        return added

    def pending_scrape(self, force: bool = False) -> list[tuple[MediaId, str]]:
        """
        Collecte les fichiers non identifies a scraper.

        Les fichiers collectes sont marques dont_scrape des maintenant : un
        echec ne sera pas retente automatiquement, seulement avec force=True.
        scrape() rend leur marque precedente aux fichiers qu'une annulation a
        empeche d'interroger.

        Returns:
            Paires (id, nom de fichier)
        """
        pending = []
        for media_id, media in self._catalog.items():
            if isinstance(media, Uncategorised) and (force or not media.dont_scrape):
                media.dont_scrape = True
                pending.append((media_id, media.video.path.name))
        return pending

    async def scrape(self, force: bool = False) -> Optional[list[MediaId]]:
        """
        Identifie les fichiers non identifies via le scraper.

        Les fichiers qu'une annulation a empeche d'interroger retrouvent leur
        marque dont_scrape precedente : ils seront tentes au prochain passage.

        Returns:
            Identifiants promus, None si aucun scraper n'est configure
        """
        if self._scraper is None:
            logger.warning("Aucune cle TMDB configuree, scraping ignore")
            return None

        previous = {
            media_id: media.dont_scrape
            for media_id, media in self._catalog.items()
            if isinstance(media, Uncategorised)
        }
        pending = self.pending_scrape(force)
        if not pending:
            logger.info("Aucun fichier a identifier")
            return []

        self.scrape_cancel.clear()
        result = await scrape_all(
            self._scraper,
            self._storage_dir,
            pending,
            timeout=self._scrape_timeout,
            max_concurrency=self._scrape_concurrency,
            cancel=self.scrape_cancel,
        )
        for media_id in result.skipped:
            media = self._catalog.get(media_id)
            if isinstance(media, Uncategorised):
                media.dont_scrape = previous[media_id]
        if result.skipped:
            logger.info(f"Scraping annule: {len(result.skipped)} fichier(s) a reprendre")
        return result.insert(self._catalog)

    async def refresh(self, scan: bool = True, force: bool = False) -> RefreshReport:
        """
        Cycle complet : purge, scan puis scraping.

        Le catalogue est enregistre apres chaque etape.

        Args:
            scan: Scanner les repertoires apres la purge
            force: Rescraper aussi les fichiers deja tentes
        """
        report = RefreshReport()

        report.removed = await self.purge()
        self.save()

        if scan:
            report.added = await self.scan()
            self.save()

        identified = await self.scrape(force)
        if identified is None:
            report.scrape_skipped = True
        else:
            report.identified = identified
        self.save()

        logger.info(
            f"Rafraichissement termine: {len(report.removed)} retire(s), "
            f"{len(report.added)} ajoute(s), {len(report.identified)} identifie(s)"
        )
        return report

    def cancel(self) -> None:
        """Demande l'arret du scan et du scraping en cours."""
        self.scan_cancel.set()
        self.scrape_cancel.set()

    async def close(self) -> None:
        """Ferme le scraper (dans la boucle d'evenements qui l'a utilise)."""
        if self._scraper is not None:
            await self._scraper.close()

    def set_watched(self, media_id: MediaId, watched: bool) -> list[MediaId]:
        """
        Marque un media comme vu ou non vu (propage aux episodes).

        Raises:
            UnknownMediaError: Si l'id est inconnu
        """
        if media_id not in self._catalog:
            raise UnknownMediaError(media_id)
        value = Watched.yes() if watched else Watched.no()
        return set_watched(media_id, value, self._catalog)

    def record_progress(self, media_id: MediaId, position: float, duration: float) -> Watched:
        return record_progress(
            media_id,
            position,
            duration,
            self._catalog,
            threshold_movies=self._threshold_movies,
            threshold_episodes=self._threshold_episodes,
        )

    def create_collection(self, name: Optional[str] = None) -> CollectionId:
        return collection_ops.create_collection(self._catalog, name)

    def rename_collection(self, collection_id: CollectionId, name: str) -> None:
        collection_ops.rename_collection(self._catalog, collection_id, name)

    def delete_collection(self, collection_id: CollectionId) -> Collection:
        return collection_ops.delete_collection(self._catalog, collection_id)

    def toggle_membership(self, collection_id: CollectionId, media_id: MediaId) -> bool:
        return collection_ops.toggle_membership(self._catalog, collection_id, media_id)
