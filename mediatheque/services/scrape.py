"""
Agregation du scraping et fusion dans le catalogue.

scrape_all() classe un lot de fichiers non identifies, interroge le scraper
et construit un arbre de fusion en attente (ScrapeResult). Cet arbre est
une donnee pure : il n'est applique au catalogue que par
ScrapeResult.insert(), sur le fil d'ecriture unique.

Garanties:
- Dans un lot, une serie (par titre) et une saison (par numero) ne sont
  demandees qu'une seule fois, quel que soit le nombre d'episodes concernes
- Un echec de recherche n'affecte que les elements qui en dependent
- Reappliquer le meme ScrapeResult ne cree jamais de doublon
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Hashable, Iterable, Optional, TypeVar

from loguru import logger

from mediatheque.core.entities.media import (
    Episode,
    EpisodeMetadata,
    MediaId,
    Movie,
    MovieMetadata,
    Season,
    SeasonMetadata,
    Series,
    SeriesMetadata,
    Uncategorised,
)
from mediatheque.core.ports.scraper import IScraper
from mediatheque.core.value_objects.detected_media import DetectedMedia, MediaType
from mediatheque.services.catalog import Catalog
from mediatheque.services.classifier import detect_media_type, is_classified

T = TypeVar("T")


@dataclass
class PendingSeason:
    """
    Saison resolue en attente de fusion.

    Attributs:
        metadata: Metadonnees de la saison
        episodes: Paires (id du fichier, metadonnees de l'episode) resolues
        unmatched: Episodes de la saison pas encore associes a un fichier
    """

    metadata: SeasonMetadata
    episodes: list[tuple[MediaId, EpisodeMetadata]] = field(default_factory=list)
    unmatched: list[EpisodeMetadata] = field(default_factory=list)


@dataclass
class PendingSeries:
    """
    Serie resolue en attente de fusion.

    Attributs:
        query: Titre normalise ayant servi a la recherche (cle du lot)
        metadata: Metadonnees de la serie
        seasons: Saisons resolues dans ce lot
    """

    query: str
    metadata: SeriesMetadata
    seasons: list[PendingSeason] = field(default_factory=list)


@dataclass
class ScrapeResult:
    """
    Arbre de fusion produit par scrape_all().

    Attributs:
        movies: Paires (id, metadonnees) des films resolus
        series: Series resolues avec leurs saisons et episodes
        skipped: Fichiers jamais interroges suite a une annulation
    """

    movies: list[tuple[MediaId, MovieMetadata]] = field(default_factory=list)
    series: list[PendingSeries] = field(default_factory=list)
    skipped: list[MediaId] = field(default_factory=list)

    @property
    def resolved_count(self) -> int:
        """Nombre de fichiers resolus (films + episodes)."""
        return len(self.movies) + sum(
            len(season.episodes) for series in self.series for season in series.seasons
        )

    def insert(self, catalog: Catalog) -> list[MediaId]:
        """
        Applique l'arbre de fusion au catalogue.

        Passe unique et idempotente :
        - Un fichier n'est promu que s'il est encore Uncategorised, en gardant
          son identifiant et sa Video (progression, dates)
        - Une serie existante est reutilisee si son ID TMDB correspond
        - Une saison existante est reutilisee si (serie, numero) correspond
        - Une serie ou une saison sans episode promu n'est jamais creee

        Args:
            catalog: Catalogue a mettre a jour

        Returns:
            Identifiants des fichiers promus
        """
        promoted: list[MediaId] = []

        for media_id, metadata in self.movies:
            current = catalog.get(media_id)
            if not isinstance(current, Uncategorised):
                logger.debug(f"Film ignore, {media_id} n'est plus non identifie")
                continue
            catalog.replace(media_id, Movie(video=current.video, metadata=metadata))
            promoted.append(media_id)

        for pending_series in self.series:
            series_id: Optional[MediaId] = None
            for pending_season in pending_series.seasons:
                season_id: Optional[MediaId] = None
                for media_id, metadata in pending_season.episodes:
                    current = catalog.get(media_id)
                    if not isinstance(current, Uncategorised):
                        logger.debug(f"Episode ignore, {media_id} n'est plus non identifie")
                        continue
                    # Serie et saison ne sont creees qu'avec leur premier episode promu
                    if series_id is None:
                        series_id = _find_or_insert_series(catalog, pending_series.metadata)
                    if season_id is None:
                        season_id = _find_or_insert_season(
                            catalog, series_id, pending_season.metadata
                        )
                    catalog.replace(
                        media_id,
                        Episode(
                            video=current.video,
                            series=series_id,
                            season=season_id,
                            metadata=metadata,
                        ),
                    )
                    promoted.append(media_id)

        if promoted:
            logger.info(f"Fusion: {len(promoted)} fichier(s) identifie(s)")
        return promoted


def _find_or_insert_series(catalog: Catalog, metadata: SeriesMetadata) -> MediaId:
    for media_id, media in catalog.items():
        if isinstance(media, Series) and media.metadata.tmdb_id == metadata.tmdb_id:
            return media_id
    return catalog.insert(Series(metadata=metadata))


def _find_or_insert_season(
    catalog: Catalog, series_id: MediaId, metadata: SeasonMetadata
) -> MediaId:
    for media_id, media in catalog.items():
        if (
            isinstance(media, Season)
            and media.series == series_id
            and media.metadata.season == metadata.season
        ):
            return media_id
    return catalog.insert(Season(metadata=metadata, series=series_id))


async def find_or_fetch(
    items: list[T],
    matches: Callable[[T], bool],
    fetch: Callable[[], Awaitable[Optional[T]]],
    misses: set[Hashable],
    key: Hashable,
) -> Optional[T]:
    """
    Recherche lineaire dans une liste, sinon production paresseuse memorisee.

    Le producteur n'est lance que si aucun element ne correspond et que la
    cle n'a pas deja echoue dans ce lot. Le resultat n'est ajoute a la liste
    qu'en cas de succes ; un echec (None ou exception) est memorise dans
    misses pour ne pas relancer la meme requete.

    Args:
        items: Liste accumulee pendant le lot (modifiee en place)
        matches: Predicat identifiant l'element recherche
        fetch: Producteur asynchrone pouvant echouer
        misses: Cles ayant deja echoue dans ce lot (modifie en place)
        key: Cle memorisee en cas d'echec

    Returns:
        L'element trouve ou produit, ou None
    """
    for item in items:
        if matches(item):
            return item
    if key in misses:
        return None

    try:
        item = await fetch()
    except Exception as e:
        logger.warning(f"Echec de la recherche {key!r}: {e}")
        item = None

    if item is None:
        misses.add(key)
        return None
    items.append(item)
    return item


class _Lookup:
    """Encapsule les appels au scraper : limite de parallelisme, timeout, erreurs."""

    def __init__(
        self,
        scraper: IScraper,
        storage_dir: Path,
        timeout: Optional[float],
        max_concurrency: int,
    ) -> None:
        self._scraper = scraper
        self._storage_dir = storage_dir
        self._timeout = timeout
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def _call(self, label: str, factory: Callable[[], Awaitable[Optional[T]]]) -> Optional[T]:
        async with self._semaphore:
            try:
                return await asyncio.wait_for(factory(), timeout=self._timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Delai depasse pour {label}")
            except Exception as e:
                logger.warning(f"Erreur de scraping pour {label}: {e}")
        return None

    async def movie(self, title: str, year: int) -> Optional[MovieMetadata]:
        return await self._call(
            f"film '{title}' ({year})",
            lambda: self._scraper.scrape_movie(self._storage_dir, title, year),
        )

    async def series(self, title: str) -> Optional[SeriesMetadata]:
        return await self._call(
            f"serie '{title}'",
            lambda: self._scraper.scrape_series(self._storage_dir, title),
        )

    async def season(
        self, series_tmdb_id: int, season: int
    ) -> Optional[tuple[SeasonMetadata, list[EpisodeMetadata]]]:
        return await self._call(
            f"saison {season} de la serie {series_tmdb_id}",
            lambda: self._scraper.scrape_season(self._storage_dir, series_tmdb_id, season),
        )


def _cancelled(cancel: Optional[asyncio.Event]) -> bool:
    return cancel is not None and cancel.is_set()


async def _scrape_movie(
    lookup: _Lookup,
    media_id: MediaId,
    detected: DetectedMedia,
    cancel: Optional[asyncio.Event],
    skipped: list[MediaId],
) -> Optional[tuple[MediaId, MovieMetadata]]:
    if _cancelled(cancel):
        skipped.append(media_id)
        return None
    metadata = await lookup.movie(detected.title, detected.year)
    if metadata is None:
        logger.info(f"Aucun film trouve pour '{detected.title}' ({detected.year})")
        return None
    return media_id, metadata


async def _scrape_series_group(
    lookup: _Lookup,
    title: str,
    episodes: list[tuple[MediaId, DetectedMedia]],
    cancel: Optional[asyncio.Event],
    skipped: list[MediaId],
) -> list[PendingSeries]:
    """Resout sequentiellement tous les episodes d'une meme serie."""
    accumulator: list[PendingSeries] = []
    misses: set[Hashable] = set()

    async def fetch_series() -> Optional[PendingSeries]:
        metadata = await lookup.series(title)
        return PendingSeries(query=title, metadata=metadata) if metadata else None

    for index, (media_id, detected) in enumerate(episodes):
        if _cancelled(cancel):
            skipped.extend(remaining for remaining, _ in episodes[index:])
            break

        pending_series = await find_or_fetch(
            accumulator,
            lambda s: s.query == title,
            fetch_series,
            misses,
            ("series", title),
        )
        if pending_series is None:
            continue

        season_number = detected.season
        series_tmdb_id = pending_series.metadata.tmdb_id

        async def fetch_season() -> Optional[PendingSeason]:
            found = await lookup.season(series_tmdb_id, season_number)
            if found is None:
                return None
            season_metadata, episode_list = found
            return PendingSeason(metadata=season_metadata, unmatched=list(episode_list))

        pending_season = await find_or_fetch(
            pending_series.seasons,
            lambda s: s.metadata.season == season_number,
            fetch_season,
            misses,
            ("season", series_tmdb_id, season_number),
        )
        if pending_season is None:
            continue

        match = next(
            (ep for ep in pending_season.unmatched if ep.episode == detected.episode),
            None,
        )
        if match is None:
            logger.info(
                f"Episode S{season_number:02d}E{detected.episode:02d} introuvable pour '{title}'"
            )
            continue
        pending_season.unmatched.remove(match)
        pending_season.episodes.append((media_id, match))

    return accumulator


async def scrape_all(
    scraper: IScraper,
    storage_dir: Path,
    pending: Iterable[tuple[MediaId, str]],
    *,
    timeout: Optional[float] = None,
    max_concurrency: int = 4,
    cancel: Optional[asyncio.Event] = None,
) -> ScrapeResult:
    """
    Scrape un lot de fichiers non identifies.

    Args:
        scraper: Collaborateur effectuant les recherches
        storage_dir: Repertoire de stockage des images
        pending: Paires (id, nom de fichier) a identifier
        timeout: Delai maximum par recherche (secondes), None = illimite
        max_concurrency: Nombre maximum de recherches simultanees
        cancel: Evenement d'annulation verifie entre deux elements

    Returns:
        ScrapeResult a appliquer avec insert()
    """
    lookup = _Lookup(scraper, storage_dir, timeout, max_concurrency)
    skipped: list[MediaId] = []

    movies: list[tuple[MediaId, DetectedMedia]] = []
    episodes_by_series: dict[str, list[tuple[MediaId, DetectedMedia]]] = {}
    for media_id, filename in pending:
        detected = detect_media_type(filename)
        if not is_classified(detected):
            logger.debug(f"Nom non reconnu, fichier laisse non identifie: {filename}")
        elif detected.media_type == MediaType.MOVIE:
            movies.append((media_id, detected))
        else:
            episodes_by_series.setdefault(detected.series_title, []).append((media_id, detected))

    logger.info(
        f"Scraping: {len(movies)} film(s), "
        f"{sum(len(v) for v in episodes_by_series.values())} episode(s) "
        f"dans {len(episodes_by_series)} serie(s)"
    )

    movie_results, series_results = await asyncio.gather(
        asyncio.gather(
            *(
                _scrape_movie(lookup, media_id, detected, cancel, skipped)
                for media_id, detected in movies
            )
        ),
        asyncio.gather(
            *(
                _scrape_series_group(lookup, title, episodes, cancel, skipped)
                for title, episodes in episodes_by_series.items()
            )
        ),
    )

    result = ScrapeResult(
        movies=[found for found in movie_results if found is not None],
        series=[series for group in series_results for series in group],
        skipped=skipped,
    )
    logger.info(f"Scraping termine: {result.resolved_count} fichier(s) resolu(s)")
    return result
