"""
Entites metier representant les concepts du domaine.

Les entites sont des objets mutables avec une identite (MediaId / CollectionId)
attribuee par le catalogue.

Exports:
- Media et ses variantes : Uncategorised, Movie, Series, Season, Episode
- Video, Watched, WatchState : fichier video et progression de visionnage
- Metadonnees : MovieMetadata, SeriesMetadata, SeasonMetadata, EpisodeMetadata
- Collection : sous-ensemble nomme du catalogue
"""

from mediatheque.core.entities.collection import DEFAULT_COLLECTION_NAME, Collection
from mediatheque.core.entities.media import (
    COMPOSITE_TYPES,
    LEAF_TYPES,
    CollectionId,
    Episode,
    EpisodeMetadata,
    Media,
    MediaId,
    Movie,
    MovieMetadata,
    Season,
    SeasonMetadata,
    Series,
    SeriesMetadata,
    Uncategorised,
    Video,
    Watched,
    WatchState,
    get_video,
    media_date,
    media_poster,
    media_title,
    media_year,
)

__all__ = [
    "COMPOSITE_TYPES",
    "LEAF_TYPES",
    "Collection",
    "CollectionId",
    "DEFAULT_COLLECTION_NAME",
    "Episode",
    "EpisodeMetadata",
    "Media",
    "MediaId",
    "Movie",
    "MovieMetadata",
    "Season",
    "SeasonMetadata",
    "Series",
    "SeriesMetadata",
    "Uncategorised",
    "Video",
    "Watched",
    "WatchState",
    "get_video",
    "media_date",
    "media_poster",
    "media_title",
    "media_year",
]
