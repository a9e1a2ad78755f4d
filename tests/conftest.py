"""
Fixtures pytest partagees pour les tests de la mediatheque.

Ce module contient les fixtures communes :
- Catalogues de test
- Mock du port IScraper
- Settings de test avec chemins temporaires

Les fabriques d'entites sont dans tests/fixtures/factories.py.
"""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from mediatheque.config import Settings
from mediatheque.core.entities import MediaId, Movie
from mediatheque.core.ports.scraper import IScraper
from mediatheque.services.catalog import Catalog
from tests.fixtures.factories import make_video, movie_metadata


@pytest.fixture
def catalog() -> Catalog:
    """Catalogue vide."""
    return Catalog()


@pytest.fixture
def movie_catalog() -> tuple[Catalog, MediaId]:
    """Catalogue contenant un film identifie."""
    catalog = Catalog()
    media_id = catalog.insert(
        Movie(video=make_video("/films/Foo.2020.mkv"), metadata=movie_metadata())
    )
    return catalog, media_id


@pytest.fixture
def mock_scraper() -> AsyncMock:
    """
    Mock de IScraper.

    Ne trouve rien par defaut ; configurer return_value / side_effect
    dans chaque test.
    """
    scraper = AsyncMock(spec=IScraper)
    scraper.scrape_movie.return_value = None
    scraper.scrape_series.return_value = None
    scraper.scrape_season.return_value = None
    return scraper


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings de test avec chemins temporaires."""
    storage_dir = tmp_path / "storage"
    videos_dir = tmp_path / "videos"
    storage_dir.mkdir(parents=True)
    videos_dir.mkdir(parents=True)
    return Settings(
        _env_file=None,  # Ignorer le fichier .env pour les tests
        storage_dir=storage_dir,
        directories=[videos_dir],
        cache_dir=tmp_path / "cache",
        tmdb_api_key=None,
        log_file=tmp_path / "test.log",
    )
