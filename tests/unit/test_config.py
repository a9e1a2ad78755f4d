"""
Tests de la configuration, du logging et du container DI.
"""

from pathlib import Path

import pytest
from loguru import logger

from mediatheque.adapters.api.cache import APICache
from mediatheque.adapters.api.tmdb_scraper import TmdbScraper
from mediatheque.config import Settings
from mediatheque.container import Container, build_scraper
from mediatheque.infrastructure.persistence import JsonCatalogStorage
from mediatheque.logging_config import configure_logging
from mediatheque.services.library import LibraryService


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("MEDIATHEQUE_TMDB_API_KEY", raising=False)
        settings = Settings(_env_file=None)

        assert settings.tmdb_language == "fr-FR"
        assert settings.scrape_concurrency == 4
        assert settings.watch_threshold_movies == 15
        assert settings.watch_threshold_episodes == 2
        assert settings.tmdb_enabled is False
        assert "~" not in str(settings.storage_dir)

    def test_environment_overrides(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("MEDIATHEQUE_TMDB_API_KEY", "cle")
        monkeypatch.setenv("MEDIATHEQUE_DIRECTORIES", f'["{tmp_path}", "~/Videos"]')
        monkeypatch.setenv("MEDIATHEQUE_SCRAPE_CONCURRENCY", "2")

        settings = Settings(_env_file=None)

        assert settings.tmdb_enabled is True
        assert settings.scrape_concurrency == 2
        assert settings.directories[0] == tmp_path
        assert settings.directories[1] == Path("~/Videos").expanduser()

    def test_invalid_concurrency_rejected(self) -> None:
        with pytest.raises(ValueError):
            Settings(_env_file=None, scrape_concurrency=0)


class TestBuildScraper:
    def test_no_key_disables_scraping(self, test_settings: Settings, tmp_path: Path) -> None:
        cache = APICache(tmp_path / "cache")
        try:
            assert build_scraper(test_settings, cache) is None
        finally:
            cache.close()

    def test_key_enables_scraping(self, test_settings: Settings, tmp_path: Path) -> None:
        settings = test_settings.model_copy(update={"tmdb_api_key": "cle"})
        cache = APICache(tmp_path / "cache")
        try:
            assert isinstance(build_scraper(settings, cache), TmdbScraper)
        finally:
            cache.close()


class TestContainer:
    def test_library_service_wiring(self, test_settings: Settings) -> None:
        container = Container()
        container.config.override(test_settings)
        try:
            service = container.library_service()

            assert isinstance(service, LibraryService)
            assert isinstance(container.catalog_storage(), JsonCatalogStorage)
            assert container.catalog_storage().path == test_settings.storage_dir / "library.json"
            assert len(service.catalog) == 0
        finally:
            container.api_cache().close()
            container.config.reset_override()


class TestConfigureLogging:
    def test_writes_json_log_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "mediatheque.log"

        configure_logging(log_level="WARNING", log_file=log_file)
        logger.info("message de test")
        logger.complete()

        assert log_file.exists()
        assert "message de test" in log_file.read_text(encoding="utf-8")
        logger.remove()

    def test_without_file(self) -> None:
        configure_logging(log_level="DEBUG")
        logger.remove()
