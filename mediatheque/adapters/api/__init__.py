"""
Adaptateurs vers les API externes.

- TmdbScraper : implementation de IScraper sur l'API TMDB
- APICache : cache persistant des reponses (diskcache)
- request_with_retry / RateLimitError : relance sur 429 et erreurs reseau
"""

from mediatheque.adapters.api.cache import APICache
from mediatheque.adapters.api.retry import RateLimitError, request_with_retry
from mediatheque.adapters.api.tmdb_scraper import TmdbScraper

__all__ = [
    "APICache",
    "RateLimitError",
    "TmdbScraper",
    "request_with_retry",
]
