"""
Ports (interfaces abstraites) definissant les contrats pour les adaptateurs.

Ports :
- IScraper : Recherche de metadonnees externes (films, series, saisons)
- ICatalogStorage : Persistance du catalogue
"""

from mediatheque.core.ports.scraper import IScraper
from mediatheque.core.ports.storage import ICatalogStorage

__all__ = [
    "IScraper",
    "ICatalogStorage",
]
