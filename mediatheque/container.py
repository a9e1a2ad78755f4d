"""
Container d'injection de dependances via dependency-injector.

Assemble la configuration, le stockage du catalogue, le scraper TMDB et
le service de mediatheque pour la CLI.
"""

from typing import Optional

from dependency_injector import containers, providers

from .adapters.api.cache import APICache
from .adapters.api.tmdb_scraper import TmdbScraper
from .config import Settings
from .infrastructure.persistence.snapshot import JsonCatalogStorage
from .services.library import LibraryService


def build_scraper(settings: Settings, cache: APICache) -> Optional[TmdbScraper]:
    """Scraper TMDB, ou None si aucune cle n'est configuree."""
    if not settings.tmdb_enabled:
        return None
    return TmdbScraper(
        api_key=settings.tmdb_api_key,
        cache=cache,
        language=settings.tmdb_language,
    )


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        service = container.library_service()
        await service.refresh()
        service.save()
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    catalog_storage = providers.Singleton(
        JsonCatalogStorage,
        storage_dir=config.provided.storage_dir,
    )

    # Cache API - partage par toutes les requetes TMDB
    api_cache = providers.Singleton(
        APICache,
        cache_dir=config.provided.cache_dir,
    )

    tmdb_scraper = providers.Singleton(
        build_scraper,
        settings=config,
        cache=api_cache,
    )

    # Factory : chaque appel recharge le catalogue depuis le stockage
    library_service = providers.Factory(
        LibraryService,
        storage=catalog_storage,
        scraper=tmdb_scraper,
        storage_dir=config.provided.storage_dir,
        directories=config.provided.directories,
        scrape_timeout=config.provided.scrape_timeout_seconds,
        scrape_concurrency=config.provided.scrape_concurrency,
        threshold_movies=config.provided.watch_threshold_movies,
        threshold_episodes=config.provided.watch_threshold_episodes,
    )
