"""
Parcours de la hierarchie et requetes de lecture sur le catalogue.

- find_episodes / find_seasons / find_all_episodes : enfants d'une saison ou d'une serie
- previous_in_list / next_in_list : episode precedent/suivant dans l'ordre (saison, episode)
- last_watched / date_added : max sur les feuilles descendantes pour les agregats
- title / full_title : titres affichables
- keep_watching / recently_added / search : listes de l'ecran d'accueil
"""

from datetime import datetime, timedelta
from typing import Iterator, Optional

from mediatheque.core.entities.media import (
    Episode,
    Media,
    MediaId,
    Movie,
    Season,
    Series,
    WatchState,
    get_video,
    media_title,
)
from mediatheque.services.catalog import Catalog
from mediatheque.utils.constants import RECENTLY_ADDED_DAYS

UNKNOWN_MEDIA_TITLE = "Média inconnu"


def find_episodes(season_id: MediaId, catalog: Catalog) -> Iterator[tuple[MediaId, Episode]]:
    for media_id, media in catalog.items():
        if isinstance(media, Episode) and media.season == season_id:
            yield media_id, media


def find_seasons(series_id: MediaId, catalog: Catalog) -> Iterator[tuple[MediaId, Season]]:
    for media_id, media in catalog.items():
        if isinstance(media, Season) and media.series == series_id:
            yield media_id, media


def find_all_episodes(series_id: MediaId, catalog: Catalog) -> Iterator[tuple[MediaId, Episode]]:
    """Tous les episodes de toutes les saisons d'une serie."""
    for season_id, _ in find_seasons(series_id, catalog):
        yield from find_episodes(season_id, catalog)


def _episode_key(episode: Episode) -> tuple[int, int]:
    return episode.metadata.season, episode.metadata.episode


def previous_in_list(media_id: MediaId, catalog: Catalog) -> Optional[MediaId]:
    """
    Episode precedent de la meme serie dans l'ordre (saison, episode).

    Returns:
        None pour le premier episode ou si l'id n'est pas un episode
    """
    media = catalog.get(media_id)
    if not isinstance(media, Episode):
        return None
    current = _episode_key(media)
    before = [
        (episode_id, episode)
        for episode_id, episode in find_all_episodes(media.series, catalog)
        if _episode_key(episode) < current
    ]
    if not before:
        return None
    return max(before, key=lambda pair: _episode_key(pair[1]))[0]


def next_in_list(media_id: MediaId, catalog: Catalog) -> Optional[MediaId]:
    """
    Episode suivant de la meme serie dans l'ordre (saison, episode).

    Returns:
        None pour le dernier episode ou si l'id n'est pas un episode
    """
    media = catalog.get(media_id)
    if not isinstance(media, Episode):
        return None
    current = _episode_key(media)
    after = [
        (episode_id, episode)
        for episode_id, episode in find_all_episodes(media.series, catalog)
        if _episode_key(episode) > current
    ]
    if not after:
        return None
    return min(after, key=lambda pair: _episode_key(pair[1]))[0]


def _descendant_episodes(media_id: MediaId, media: Media, catalog: Catalog) -> list[Episode]:
    if isinstance(media, Series):
        return [episode for _, episode in find_all_episodes(media_id, catalog)]
    if isinstance(media, Season):
        return [episode for _, episode in find_episodes(media_id, catalog)]
    return []


def last_watched(media_id: MediaId, catalog: Catalog) -> Optional[datetime]:
    """Date du dernier visionnage (max sur les episodes pour un agregat)."""
    media = catalog.get(media_id)
    if media is None:
        return None
    video = get_video(media)
    if video is not None:
        return video.last_watched
    dates = [
        episode.video.last_watched
        for episode in _descendant_episodes(media_id, media, catalog)
        if episode.video.last_watched is not None
    ]
    return max(dates, default=None)


def date_added(media_id: MediaId, catalog: Catalog) -> Optional[datetime]:
    """Date d'ajout (max sur les episodes pour un agregat)."""
    media = catalog.get(media_id)
    if media is None:
        return None
    video = get_video(media)
    if video is not None:
        return video.added
    return max(
        (episode.video.added for episode in _descendant_episodes(media_id, media, catalog)),
        default=None,
    )


def title(media_id: MediaId, catalog: Catalog) -> str:
    media = catalog.get(media_id)
    return media_title(media) if media is not None else UNKNOWN_MEDIA_TITLE


def full_title(media_id: MediaId, catalog: Catalog) -> str:
    """
    Titre complet d'un media.

    Exemples:
        Film : "Inception (2010)"
        Episode : "Breaking Bad S01E02 - Cat's in the Bag..."
        Saison : "Breaking Bad S01 - Saison 1"
    """
    media = catalog.get(media_id)
    if media is None:
        return UNKNOWN_MEDIA_TITLE
    if isinstance(media, Movie):
        return f"{media.metadata.title} ({media.metadata.year})"
    if isinstance(media, Episode):
        return (
            f"{title(media.series, catalog)} "
            f"S{media.metadata.season:02d}E{media.metadata.episode:02d} - {media.metadata.title}"
        )
    if isinstance(media, Season):
        return f"{title(media.series, catalog)} S{media.metadata.season:02d} - {media.metadata.title}"
    return media_title(media)


def keep_watching(catalog: Catalog, limit: Optional[int] = 20) -> list[MediaId]:
    """Feuilles en cours de visionnage, la plus recemment regardee en premier."""
    in_progress = []
    for media_id, media in catalog.items():
        video = get_video(media)
        if video is not None and video.watched.state == WatchState.PARTIAL:
            in_progress.append((media_id, video.last_watched or datetime.min))
    in_progress.sort(key=lambda pair: pair[1], reverse=True)
    ids = [media_id for media_id, _ in in_progress]
    return ids[:limit] if limit is not None else ids


def recently_added(
    catalog: Catalog,
    days: int = RECENTLY_ADDED_DAYS,
    limit: Optional[int] = 20,
    now: Optional[datetime] = None,
) -> list[MediaId]:
    """Feuilles ajoutees depuis moins de `days` jours, la plus recente en premier."""
    cutoff = (now or datetime.now()) - timedelta(days=days)
    recent = []
    for media_id, media in catalog.items():
        video = get_video(media)
        if video is not None and video.added > cutoff:
            recent.append((media_id, video.added))
    recent.sort(key=lambda pair: pair[1], reverse=True)
    ids = [media_id for media_id, _ in recent]
    return ids[:limit] if limit is not None else ids


def search(catalog: Catalog, query: str) -> list[MediaId]:
    """Medias dont le titre contient la requete (insensible a la casse)."""
    needle = query.strip().lower()
    if not needle:
        return list(catalog)
    return [
        media_id
        for media_id, media in catalog.items()
        if needle in media_title(media).lower()
    ]
