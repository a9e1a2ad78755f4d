"""
Tests d'integration du cycle complet de la mediatheque.

Utilise les vraies implementations (stockage JSON, scan du disque, fusion
des resultats) ; seul le scraper TMDB est simule.
"""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from dependency_injector import providers

from mediatheque.config import Settings
from mediatheque.container import Container
from mediatheque.core.entities import (
    Collection,
    Episode,
    Movie,
    Season,
    Series,
    Uncategorised,
    WatchState,
)
from mediatheque.infrastructure.persistence import JsonCatalogStorage
from mediatheque.services import navigation
from tests.fixtures.factories import (
    episode_metadata,
    movie_metadata,
    season_metadata,
    series_metadata,
)


def _count(catalog, media_type) -> int:
    return sum(1 for _, media in catalog.items() if isinstance(media, media_type))


@pytest.fixture
def videos_dir(test_settings: Settings) -> Path:
    """Arborescence video de test."""
    root = test_settings.directories[0]
    (root / "Films").mkdir()
    (root / "Series" / "Breaking Bad").mkdir(parents=True)
    (root / "Films" / "Alien.1979.1080p.mkv").write_bytes(b"")
    (root / "Series" / "Breaking Bad" / "Breaking.Bad.S01E01.mkv").write_bytes(b"")
    (root / "Series" / "Breaking Bad" / "Breaking.Bad.S01E02.mp4").write_bytes(b"")
    (root / "vacances.mkv").write_bytes(b"")
    (root / "notes.txt").write_text("pas une video")
    return root


@pytest.fixture
def scraper(mock_scraper: AsyncMock) -> AsyncMock:
    mock_scraper.scrape_movie.return_value = movie_metadata(348, "Alien", 1979)
    mock_scraper.scrape_series.return_value = series_metadata()
    mock_scraper.scrape_season.return_value = (
        season_metadata(1),
        [episode_metadata(1, 1, "Chute libre"), episode_metadata(1, 2, "Le Choix")],
    )
    return mock_scraper


@pytest.fixture
def container(test_settings: Settings, scraper: AsyncMock):
    container = Container()
    container.config.override(test_settings)
    container.tmdb_scraper.override(providers.Object(scraper))
    yield container
    container.api_cache().close()


class TestRefreshCycle:
    """Purge, scan et scraping enchaines sur un vrai stockage."""

    @pytest.mark.asyncio
    async def test_first_refresh_builds_catalog(
        self, container, videos_dir: Path, test_settings: Settings
    ) -> None:
        service = container.library_service()

        report = await service.refresh()
        await service.close()

        assert len(report.added) == 4
        assert len(report.identified) == 3
        assert report.scrape_skipped is False

        catalog = service.catalog
        assert _count(catalog, Movie) == 1
        assert _count(catalog, Series) == 1
        assert _count(catalog, Season) == 1
        assert _count(catalog, Episode) == 2
        assert _count(catalog, Uncategorised) == 1

        # Le snapshot enregistre contient le meme catalogue
        reloaded = JsonCatalogStorage(test_settings.storage_dir).load()
        assert len(reloaded) == len(catalog)
        unknown = next(m for _, m in reloaded.items() if isinstance(m, Uncategorised))
        assert unknown.video.path.name == "vacances.mkv"
        assert unknown.dont_scrape is True

    @pytest.mark.asyncio
    async def test_second_refresh_does_not_retry(
        self, container, videos_dir: Path, scraper: AsyncMock
    ) -> None:
        first = container.library_service()
        await first.refresh()

        second = container.library_service()
        report = await second.refresh()

        assert report.added == []
        assert report.identified == []
        assert scraper.scrape_movie.await_count == 1
        assert scraper.scrape_series.await_count == 1
        assert scraper.scrape_season.await_count == 1

    @pytest.mark.asyncio
    async def test_force_rescrapes_unidentified(
        self, container, videos_dir: Path, scraper: AsyncMock
    ) -> None:
        await container.library_service().refresh()
        (videos_dir / "vacances.mkv").rename(videos_dir / "Vacances.2019.mkv")

        service = container.library_service()
        report = await service.refresh(force=True)

        # L'ancien chemin est purge, le nouveau est identifie comme film
        assert len(report.removed) == 1
        assert len(report.added) == 1
        assert len(report.identified) == 1
        assert _count(service.catalog, Uncategorised) == 0

    @pytest.mark.asyncio
    async def test_deleted_file_leaves_catalog_and_collections(
        self, container, videos_dir: Path
    ) -> None:
        service = container.library_service()
        await service.refresh()
        movie_id = next(i for i, m in service.catalog.items() if isinstance(m, Movie))
        collection_id = service.catalog.insert_collection(
            Collection(name="Favoris", media={movie_id})
        )
        service.set_watched(movie_id, True)
        service.save()

        (videos_dir / "Films" / "Alien.1979.1080p.mkv").unlink()
        service = container.library_service()
        report = await service.refresh(scan=False)

        assert report.removed == [movie_id]
        assert movie_id not in service.catalog
        assert len(service.catalog.collection(collection_id)) == 0

    @pytest.mark.asyncio
    async def test_watched_propagates_and_persists(self, container, videos_dir: Path) -> None:
        service = container.library_service()
        await service.refresh()
        series_id = next(i for i, m in service.catalog.items() if isinstance(m, Series))

        service.set_watched(series_id, True)
        service.save()

        reloaded = container.library_service().catalog
        episodes = list(navigation.find_all_episodes(series_id, reloaded))
        assert len(episodes) == 2
        assert all(e.video.watched.state == WatchState.YES for _, e in episodes)
