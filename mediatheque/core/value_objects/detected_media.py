"""
Objets valeur pour la classification des noms de fichiers.

Objet valeur immutable representant ce que l'heuristique de classification
a devine a partir d'un nom de fichier video brut.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MediaType(Enum):
    """Type de media detecte depuis le nom de fichier.

    Valeurs:
        MOVIE: Film (titre + annee)
        EPISODE: Episode de serie (titre + saison + episode)
        UNKNOWN: Nom non reconnu, le fichier reste non identifie
    """

    MOVIE = "movie"
    EPISODE = "episode"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DetectedMedia:
    """
    Resultat de la classification d'un nom de fichier.

    Les titres sont normalises (minuscules, separateurs reduits a un espace).

    Attributs:
        media_type: Type detecte (MOVIE, EPISODE, UNKNOWN)
        title: Titre du film ou de la serie
        year: Annee de sortie (films uniquement)
        season: Numero de saison (episodes uniquement)
        episode: Numero d'episode (episodes uniquement)
    """

    media_type: MediaType = MediaType.UNKNOWN
    title: str = ""
    year: Optional[int] = None
    season: Optional[int] = None
    episode: Optional[int] = None

    @classmethod
    def unknown(cls) -> "DetectedMedia":
        return cls()

    @classmethod
    def movie(cls, title: str, year: int) -> "DetectedMedia":
        return cls(MediaType.MOVIE, title=title, year=year)

    @classmethod
    def episode_of(cls, series_title: str, season: int, episode: int) -> "DetectedMedia":
        return cls(MediaType.EPISODE, title=series_title, season=season, episode=episode)

    @property
    def series_title(self) -> str:
        """Alias de title pour les episodes."""
        return self.title
