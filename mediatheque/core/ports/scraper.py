"""
Interface port pour le scraper de metadonnees.

Le scraper est un collaborateur injecte : il effectue les appels reseau et
met en cache les images telechargees. Le coeur du catalogue ne voit que
ce contrat.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from mediatheque.core.entities.media import (
    EpisodeMetadata,
    MovieMetadata,
    SeasonMetadata,
    SeriesMetadata,
)


class IScraper(ABC):
    """
    Interface des recherches de metadonnees externes.

    Les trois recherches sont idempotentes, sans etat partage et peuvent
    etre appelees en parallele pour des cles independantes. Elles retournent
    None quand rien n'est trouve. Une exception levee par une implementation
    est traitee comme "non trouve" par l'appelant.
    """

    @abstractmethod
    async def scrape_movie(
        self, storage_dir: Path, title: str, year: int
    ) -> Optional[MovieMetadata]:
        """
        Recherche un film par titre et annee.

        Args :
            storage_dir : Repertoire ou stocker les images telechargees
            title : Titre normalise du film
            year : Annee de sortie

        Retourne :
            Les metadonnees du premier resultat, ou None
        """
        ...

    @abstractmethod
    async def scrape_series(
        self, storage_dir: Path, title: str
    ) -> Optional[SeriesMetadata]:
        """Recherche une serie par titre."""
        ...

    @abstractmethod
    async def scrape_season(
        self, storage_dir: Path, series_tmdb_id: int, season: int
    ) -> Optional[tuple[SeasonMetadata, list[EpisodeMetadata]]]:
        """
        Recupere une saison et la liste complete de ses episodes.

        Args :
            storage_dir : Repertoire ou stocker les images telechargees
            series_tmdb_id : ID TMDB de la serie
            season : Numero de saison

        Retourne :
            (metadonnees de saison, episodes), ou None si la saison n'existe pas
        """
        ...

    async def close(self) -> None:
        """Libere les ressources reseau (rien a faire par defaut)."""
        return None
