"""
Scraper TMDB (The Movie Database).

Implemente IScraper :
- scrape_movie : /search/movie avec filtre sur l'annee, premier resultat
- scrape_series : /search/tv, premier resultat
- scrape_season : /tv/{id}/season/{n}, saison et liste de ses episodes

Les reponses JSON sont mises en cache (APICache) et les posters sont
telecharges une seule fois dans storage_dir/posters.

Usage:
    scraper = TmdbScraper(api_key="xxx", cache=APICache(cache_dir))
    metadata = await scraper.scrape_movie(storage_dir, "alien", 1979)
    await scraper.close()
"""

import asyncio
from datetime import date
from pathlib import Path
from typing import Any, Optional

import httpx
from loguru import logger

from mediatheque.adapters.api.cache import APICache, make_key
from mediatheque.adapters.api.retry import request_with_retry
from mediatheque.core.entities.media import (
    EpisodeMetadata,
    MovieMetadata,
    SeasonMetadata,
    SeriesMetadata,
)
from mediatheque.core.ports.scraper import IScraper
from mediatheque.utils.constants import POSTERS_DIRNAME
from mediatheque.utils.helpers import clean_title


def parse_date(value: Optional[str]) -> Optional[date]:
    """Convertit une date TMDB (YYYY-MM-DD, parfois vide) en date."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class TmdbScraper(IScraper):
    """
    Scraper de metadonnees base sur l'API TMDB v3.

    Attributes:
        TMDB_BASE_URL: URL de base de l'API
        TMDB_IMAGE_BASE_URL: URL de base des posters (largeur 200px)
    """

    TMDB_BASE_URL = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w200"

    def __init__(
        self,
        api_key: str,
        cache: APICache,
        language: str = "fr-FR",
        timeout: float = 30.0,
    ) -> None:
        """
        Initialise le scraper.

        Args:
            api_key: Cle API v3 ou Read Access Token v4
            cache: Cache des reponses JSON
            language: Langue des titres et resumes
            timeout: Delai des requetes HTTP en secondes
        """
        self._api_key = api_key
        self._cache = cache
        self._language = language
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None
        self._images: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client de l'API, cree a la premiere utilisation.

        Une cle v3 (32 caracteres) passe en parametre api_key, un token v4
        (JWT long) en header Bearer.
        """
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            params = {}
            if len(self._api_key) > 40:
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                params["api_key"] = self._api_key
            self._client = httpx.AsyncClient(
                base_url=self.TMDB_BASE_URL,
                headers=headers,
                params=params,
                timeout=self._timeout,
            )
        return self._client

    def _get_images_client(self) -> httpx.AsyncClient:
        # Client separe : la cle API n'est jamais envoyee au serveur d'images
        if self._images is None or self._images.is_closed:
            self._images = httpx.AsyncClient(
                base_url=self.TMDB_IMAGE_BASE_URL,
                timeout=self._timeout,
                follow_redirects=True,
            )
        return self._images

    async def _get_json(
        self, url: str, params: dict[str, Any], cache_key: str, ttl: int
    ) -> Optional[dict[str, Any]]:
        """GET avec cache ; None si la ressource n'existe pas (404)."""
        cached = await self._cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            response = await request_with_retry(
                self._get_client(),
                "GET",
                url,
                params={"language": self._language, **params},
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise

        data = response.json()
        await self._cache.set(cache_key, data, ttl)
        return data

    async def _download_poster(
        self, storage_dir: Path, poster_path: Optional[str]
    ) -> Optional[Path]:
        """
        Telecharge un poster dans storage_dir/posters s'il n'y est pas deja.

        Un echec de telechargement n'empeche pas l'identification : le media
        est simplement enregistre sans poster.
        """
        if not poster_path:
            return None

        filename = poster_path.replace("/", "")
        target = Path(storage_dir) / POSTERS_DIRNAME / filename
        if target.exists():
            return target

        try:
            response = await request_with_retry(
                self._get_images_client(), "GET", f"/{filename}"
            )
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, _write_file, target, response.content)
        except (httpx.HTTPError, OSError) as e:
            logger.warning(f"Poster non telecharge {filename}: {e}")
            return None
        return target

    async def scrape_movie(
        self, storage_dir: Path, title: str, year: int
    ) -> Optional[MovieMetadata]:
        data = await self._get_json(
            "/search/movie",
            {"query": title, "year": year, "include_adult": "false"},
            make_key("tmdb", "search_movie", self._language, title, year),
            APICache.SEARCH_TTL,
        )
        results = (data or {}).get("results") or []
        if not results:
            logger.debug(f"Aucun film TMDB pour '{title}' ({year})")
            return None

        item = results[0]
        released = parse_date(item.get("release_date"))
        return MovieMetadata(
            tmdb_id=item["id"],
            title=clean_title(item.get("title") or item.get("original_title") or title),
            year=released.year if released else year,
            poster=await self._download_poster(storage_dir, item.get("poster_path")),
            released=released,
            overview=item.get("overview") or None,
        )

    async def scrape_series(self, storage_dir: Path, title: str) -> Optional[SeriesMetadata]:
        data = await self._get_json(
            "/search/tv",
            {"query": title, "include_adult": "false"},
            make_key("tmdb", "search_tv", self._language, title),
            APICache.SEARCH_TTL,
        )
        results = (data or {}).get("results") or []
        if not results:
            logger.debug(f"Aucune serie TMDB pour '{title}'")
            return None

        item = results[0]
        return SeriesMetadata(
            tmdb_id=item["id"],
            title=clean_title(item.get("name") or item.get("original_name") or title),
            poster=await self._download_poster(storage_dir, item.get("poster_path")),
            aired=parse_date(item.get("first_air_date")),
            overview=item.get("overview") or None,
        )

    async def scrape_season(
        self, storage_dir: Path, series_tmdb_id: int, season: int
    ) -> Optional[tuple[SeasonMetadata, list[EpisodeMetadata]]]:
        data = await self._get_json(
            f"/tv/{series_tmdb_id}/season/{season}",
            {},
            make_key("tmdb", "season", self._language, series_tmdb_id, season),
            APICache.DETAILS_TTL,
        )
        if data is None:
            logger.debug(f"Saison {season} introuvable pour la serie TMDB {series_tmdb_id}")
            return None

        number = data.get("season_number", season)
        metadata = SeasonMetadata(
            series_tmdb_id=series_tmdb_id,
            title=clean_title(data.get("name") or f"Saison {number}"),
            season=number,
            poster=await self._download_poster(storage_dir, data.get("poster_path")),
            aired=parse_date(data.get("air_date")),
            overview=data.get("overview") or None,
        )
        episodes = [
            EpisodeMetadata(
                series_tmdb_id=series_tmdb_id,
                title=clean_title(episode.get("name") or ""),
                season=episode.get("season_number", number),
                episode=episode["episode_number"],
                aired=parse_date(episode.get("air_date")),
            )
            for episode in data.get("episodes") or []
        ]
        return metadata, episodes

    async def close(self) -> None:
        """Ferme les clients HTTP."""
        for client in (self._client, self._images):
            if client is not None and not client.is_closed:
                await client.aclose()
        self._client = None
        self._images = None


def _write_file(target: Path, content: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    temp = target.with_name(f".{target.name}.part")
    temp.write_bytes(content)
    temp.replace(target)
