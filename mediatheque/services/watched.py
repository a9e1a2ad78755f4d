"""
Agregation de la progression de visionnage.

Seules les feuilles (film, episode, fichier non identifie) stockent leur
progression. Celle d'une saison ou d'une serie est toujours calculee :
- Saison : moyenne des progressions de ses episodes
- Serie : moyenne des progressions CALCULEES de ses saisons (chaque saison
  compte autant, quel que soit son nombre d'episodes)

La seule facon de modifier un agregat est de propager une valeur vers
les feuilles avec set_watched().
"""

from datetime import datetime
from typing import Iterable, Optional

from mediatheque.core.entities.media import (
    Episode,
    MediaId,
    Season,
    Series,
    Watched,
    get_video,
)
from mediatheque.core.exceptions import UnknownMediaError
from mediatheque.services.catalog import Catalog
from mediatheque.services.navigation import find_all_episodes, find_episodes, find_seasons
from mediatheque.utils.constants import WATCHED_EPSILON


def _from_mean(percents: Iterable[float]) -> Watched:
    values = list(percents)
    if not values:
        return Watched.no()
    total = sum(values) / len(values)
    if total < WATCHED_EPSILON:
        return Watched.no()
    if abs(total - 1.0) < WATCHED_EPSILON:
        return Watched.yes()
    return Watched.partial(seconds=0.0, percent=total)


def calculate_season_watched(season_id: MediaId, catalog: Catalog) -> Watched:
    """Progression d'une saison (NO si elle n'a aucun episode)."""
    return _from_mean(
        episode.video.watched.percent for _, episode in find_episodes(season_id, catalog)
    )


def calculate_series_watched(series_id: MediaId, catalog: Catalog) -> Watched:
    """Progression d'une serie, agregee sur deux niveaux."""
    return _from_mean(
        calculate_season_watched(season_id, catalog).percent
        for season_id, _ in find_seasons(series_id, catalog)
    )


def calculate_watched(media_id: MediaId, catalog: Catalog) -> Optional[Watched]:
    """
    Progression de n'importe quel media.

    Returns:
        La progression stockee pour une feuille, calculee pour une saison
        ou une serie, None si l'identifiant est inconnu
    """
    media = catalog.get(media_id)
    if media is None:
        return None
    if isinstance(media, Series):
        return calculate_series_watched(media_id, catalog)
    if isinstance(media, Season):
        return calculate_season_watched(media_id, catalog)
    video = get_video(media)
    return video.watched if video is not None else None


def set_watched(media_id: MediaId, value: Watched, catalog: Catalog) -> list[MediaId]:
    """
    Definit la progression d'un media.

    Sur une feuille, la valeur est stockee directement. Sur une saison elle est
    propagee a tous ses episodes, sur une serie a tous les episodes de toutes
    ses saisons.

    Returns:
        Identifiants des feuilles modifiees (vide si l'id est inconnu)
    """
    media = catalog.get(media_id)
    if media is None:
        return []
    if isinstance(media, Series):
        targets = [episode_id for episode_id, _ in find_all_episodes(media_id, catalog)]
    elif isinstance(media, Season):
        targets = [episode_id for episode_id, _ in find_episodes(media_id, catalog)]
    else:
        targets = [media_id]

    updated: list[MediaId] = []
    for target in targets:
        leaf = catalog.get(target)
        video = get_video(leaf) if leaf is not None else None
        if video is not None:
            video.watched = value
            updated.append(target)
    return updated


def record_progress(
    media_id: MediaId,
    position: float,
    duration: float,
    catalog: Catalog,
    threshold_movies: int = 15,
    threshold_episodes: int = 2,
) -> Watched:
    """
    Enregistre la position de lecture d'une feuille.

    Une video est consideree vue quand il reste moins de `threshold`
    minutes a regarder (generique de fin). Sinon la position et la
    proportion sont memorisees. La date de dernier visionnage est mise a jour.

    Args:
        media_id: Feuille en cours de lecture
        position: Position courante en secondes (ramenee dans [0, duration])
        duration: Duree totale en secondes
        catalog: Catalogue a mettre a jour
        threshold_movies: Seuil en minutes pour les films
        threshold_episodes: Seuil en minutes pour les episodes

    Raises:
        UnknownMediaError: Si l'id ne designe pas une feuille
    """
    media = catalog.get(media_id)
    video = get_video(media) if media is not None else None
    if video is None:
        raise UnknownMediaError(media_id)

    threshold = threshold_episodes if isinstance(media, Episode) else threshold_movies
    position = min(max(position, 0.0), max(duration, 0.0))
    if duration <= 0 or duration - position < threshold * 60:
        video.watched = Watched.yes()
    else:
        video.watched = Watched.partial(seconds=position, percent=position / duration)
    video.last_watched = datetime.now()
    return video.watched
