"""
Entites media du catalogue.

Un media est l'une des cinq variantes suivantes (union fermee) :
- Uncategorised : fichier decouvert par le scan, pas encore identifie
- Movie : film identifie, porte une video
- Series : serie TV, sans video, parente des saisons
- Season : saison d'une serie (reference arriere vers la serie)
- Episode : episode identifie, porte une video

Les references entre entites passent uniquement par des MediaId, jamais par
des pointeurs d'objets : le catalogue est la seule source de verite.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import NewType, Optional, Union

MediaId = NewType("MediaId", int)
CollectionId = NewType("CollectionId", int)


class WatchState(Enum):
    """Etat de visionnage d'une video."""

    NO = "no"
    PARTIAL = "partial"
    YES = "yes"


@dataclass(frozen=True)
class Watched:
    """
    Progression de visionnage.

    Seul l'etat PARTIAL utilise seconds et fraction. Pour les agregats
    (saison, serie), seconds vaut toujours 0.

    Attributs :
        state : Etat de visionnage (NO, PARTIAL, YES)
        seconds : Position de lecture en secondes
        fraction : Progression entre 0 et 1
    """

    state: WatchState = WatchState.NO
    seconds: float = 0.0
    fraction: float = 0.0

    @classmethod
    def no(cls) -> "Watched":
        return cls(WatchState.NO)

    @classmethod
    def yes(cls) -> "Watched":
        return cls(WatchState.YES)

    @classmethod
    def partial(cls, seconds: float, percent: float) -> "Watched":
        return cls(WatchState.PARTIAL, seconds=seconds, fraction=percent)

    @property
    def percent(self) -> float:
        """Progression effective : 0.0 pour NO, 1.0 pour YES."""
        if self.state == WatchState.NO:
            return 0.0
        if self.state == WatchState.YES:
            return 1.0
        return self.fraction


@dataclass
class Video:
    """
    Fichier video suivi par le catalogue.

    Attributs :
        path : Chemin normalise du fichier (cle de deduplication)
        watched : Progression de visionnage
        added : Date d'ajout au catalogue
        last_watched : Date du dernier visionnage
    """

    path: Path
    watched: Watched = field(default_factory=Watched.no)
    added: datetime = field(default_factory=datetime.now)
    last_watched: Optional[datetime] = None


@dataclass
class MovieMetadata:
    """
    Metadonnees d'un film depuis TMDB.

    Attributs :
        tmdb_id : The Movie Database ID
        title : Titre localise
        year : Annee de sortie
        poster : Chemin local du poster telecharge
        released : Date de sortie
        overview : Resume
    """

    tmdb_id: int
    title: str
    year: int
    poster: Optional[Path] = None
    released: Optional[date] = None
    overview: Optional[str] = None


@dataclass
class SeriesMetadata:
    """Metadonnees d'une serie TV depuis TMDB."""

    tmdb_id: int
    title: str
    poster: Optional[Path] = None
    aired: Optional[date] = None
    overview: Optional[str] = None


@dataclass
class SeasonMetadata:
    """Metadonnees d'une saison (numero de saison 0 pour les speciaux)."""

    series_tmdb_id: int
    title: str
    season: int
    poster: Optional[Path] = None
    aired: Optional[date] = None
    overview: Optional[str] = None


@dataclass
class EpisodeMetadata:
    """Metadonnees d'un episode."""

    series_tmdb_id: int
    title: str
    season: int
    episode: int
    aired: Optional[date] = None


@dataclass
class Uncategorised:
    """
    Fichier decouvert mais pas encore identifie.

    Attributs :
        video : Fichier video
        dont_scrape : True si un scraping a deja ete tente (pas de relance
                      automatique, seulement un scraping force)
    """

    video: Video
    dont_scrape: bool = False


@dataclass
class Movie:
    video: Video
    metadata: MovieMetadata


@dataclass
class Series:
    metadata: SeriesMetadata


@dataclass
class Season:
    metadata: SeasonMetadata
    series: MediaId


@dataclass
class Episode:
    video: Video
    series: MediaId
    season: MediaId
    metadata: EpisodeMetadata


Media = Union[Uncategorised, Movie, Series, Season, Episode]

LEAF_TYPES = (Uncategorised, Movie, Episode)
COMPOSITE_TYPES = (Series, Season)


def _unknown_variant(media: object) -> TypeError:
    return TypeError(f"Variante de media inconnue: {type(media).__name__}")


def get_video(media: Media) -> Optional[Video]:
    """Retourne la video d'une feuille, None pour une serie ou une saison."""
    if isinstance(media, LEAF_TYPES):
        return media.video
    if isinstance(media, COMPOSITE_TYPES):
        return None
    raise _unknown_variant(media)


def media_title(media: Media) -> str:
    """
    Titre court d'un media.

    Un fichier non identifie est designe par son nom de fichier,
    une saison par "Saison N".
    """
    if isinstance(media, Uncategorised):
        return media.video.path.name
    if isinstance(media, (Movie, Series, Episode)):
        return media.metadata.title
    if isinstance(media, Season):
        return f"Saison {media.metadata.season}"
    raise _unknown_variant(media)


def media_date(media: Media) -> Optional[date]:
    """Date de sortie ou de premiere diffusion."""
    if isinstance(media, Uncategorised):
        return None
    if isinstance(media, Movie):
        return media.metadata.released
    if isinstance(media, (Series, Season, Episode)):
        return media.metadata.aired
    raise _unknown_variant(media)


def media_year(media: Media) -> Optional[int]:
    if isinstance(media, Movie):
        return media.metadata.year
    released = media_date(media)
    return released.year if released else None


def media_poster(media: Media) -> Optional[Path]:
    if isinstance(media, (Movie, Series, Season)):
        return media.metadata.poster
    if isinstance(media, (Uncategorised, Episode)):
        return None
    raise _unknown_variant(media)
