"""
Tests unitaires de l'agregation de la progression de visionnage.
"""

import pytest

from mediatheque.core.entities import MediaId, Watched, WatchState
from mediatheque.core.exceptions import UnknownMediaError
from mediatheque.services.catalog import Catalog
from mediatheque.services.watched import (
    calculate_season_watched,
    calculate_series_watched,
    calculate_watched,
    record_progress,
    set_watched,
)
from tests.fixtures.factories import add_series, make_uncategorised


def _set(catalog: Catalog, media_id: MediaId, watched: Watched) -> None:
    catalog.get(media_id).video.watched = watched


class TestSeasonWatched:
    """Tests de la progression d'une saison."""

    def test_all_yes_is_yes(self, catalog: Catalog) -> None:
        _, seasons, episodes = add_series(catalog, {1: 3})
        for episode_id in episodes.values():
            _set(catalog, episode_id, Watched.yes())
        assert calculate_season_watched(seasons[1], catalog) == Watched.yes()

    def test_all_no_is_no(self, catalog: Catalog) -> None:
        _, seasons, _ = add_series(catalog, {1: 3})
        assert calculate_season_watched(seasons[1], catalog) == Watched.no()

    def test_mixed_is_partial_mean(self, catalog: Catalog) -> None:
        _, seasons, episodes = add_series(catalog, {1: 4})
        _set(catalog, episodes[(1, 1)], Watched.yes())
        _set(catalog, episodes[(1, 2)], Watched.partial(300.0, 0.5))

        watched = calculate_season_watched(seasons[1], catalog)

        assert watched.state == WatchState.PARTIAL
        assert watched.percent == pytest.approx(1.5 / 4)
        assert watched.seconds == 0.0

    def test_empty_season_is_no(self, catalog: Catalog) -> None:
        _, seasons, _ = add_series(catalog, {1: 0})
        assert calculate_season_watched(seasons[1], catalog) == Watched.no()


class TestSeriesWatched:
    """Tests de l'agregation sur deux niveaux."""

    def test_seasons_weigh_equally(self, catalog: Catalog) -> None:
        series_id, _, episodes = add_series(catalog, {1: 1, 2: 4})
        # Saison 1 entierement vue, saison 2 pas du tout
        _set(catalog, episodes[(1, 1)], Watched.yes())

        watched = calculate_series_watched(series_id, catalog)

        assert watched.state == WatchState.PARTIAL
        assert watched.percent == pytest.approx(0.5)

    def test_all_seasons_watched_is_yes(self, catalog: Catalog) -> None:
        series_id, _, episodes = add_series(catalog, {1: 2, 2: 1})
        for episode_id in episodes.values():
            _set(catalog, episode_id, Watched.yes())
        assert calculate_series_watched(series_id, catalog) == Watched.yes()

    def test_empty_series_is_no(self, catalog: Catalog) -> None:
        series_id, _, _ = add_series(catalog, {})
        assert calculate_series_watched(series_id, catalog) == Watched.no()


class TestCalculateWatched:
    """Tests de calculate_watched sur chaque variante."""

    def test_leaf_returns_stored_value(self, catalog: Catalog) -> None:
        media_id = catalog.insert(make_uncategorised("/v/a.mkv", watched=Watched.partial(5.0, 0.2)))
        assert calculate_watched(media_id, catalog) == Watched.partial(5.0, 0.2)

    def test_unknown_id_returns_none(self, catalog: Catalog) -> None:
        assert calculate_watched(MediaId(404), catalog) is None

    def test_dispatches_composites(self, catalog: Catalog) -> None:
        series_id, seasons, episodes = add_series(catalog, {1: 1})
        _set(catalog, episodes[(1, 1)], Watched.yes())
        assert calculate_watched(series_id, catalog) == Watched.yes()
        assert calculate_watched(seasons[1], catalog) == Watched.yes()


class TestSetWatched:
    """Tests de la propagation vers les feuilles."""

    def test_series_sets_every_episode(self, catalog: Catalog) -> None:
        series_id, _, episodes = add_series(catalog, {1: 2, 2: 3})

        updated = set_watched(series_id, Watched.yes(), catalog)

        assert sorted(updated) == sorted(episodes.values())
        for episode_id in episodes.values():
            assert catalog.get(episode_id).video.watched == Watched.yes()

    def test_season_only_touches_its_episodes(self, catalog: Catalog) -> None:
        _, seasons, episodes = add_series(catalog, {1: 2, 2: 2})

        set_watched(seasons[2], Watched.yes(), catalog)

        assert catalog.get(episodes[(1, 1)]).video.watched == Watched.no()
        assert catalog.get(episodes[(2, 1)]).video.watched == Watched.yes()

    def test_leaf(self, catalog: Catalog) -> None:
        media_id = catalog.insert(make_uncategorised("/v/a.mkv"))
        assert set_watched(media_id, Watched.yes(), catalog) == [media_id]
        assert calculate_watched(media_id, catalog) == Watched.yes()

    def test_unknown_id_is_noop(self, catalog: Catalog) -> None:
        assert set_watched(MediaId(404), Watched.yes(), catalog) == []


class TestRecordProgress:
    """Tests de l'enregistrement de la position de lecture."""

    def test_partial_before_threshold(self, movie_catalog) -> None:
        catalog, media_id = movie_catalog

        watched = record_progress(media_id, 1800.0, 7200.0, catalog)

        assert watched.state == WatchState.PARTIAL
        assert watched.seconds == 1800.0
        assert watched.percent == pytest.approx(0.25)
        assert catalog.get(media_id).video.last_watched is not None

    def test_yes_within_movie_threshold(self, movie_catalog) -> None:
        catalog, media_id = movie_catalog
        # 10 minutes restantes < 15 minutes
        assert record_progress(media_id, 6600.0, 7200.0, catalog) == Watched.yes()

    def test_episode_threshold_is_shorter(self, catalog: Catalog) -> None:
        _, _, episodes = add_series(catalog, {1: 1})
        episode_id = episodes[(1, 1)]
        # 10 minutes restantes > 2 minutes : toujours en cours
        watched = record_progress(episode_id, 2000.0, 2600.0, catalog)
        assert watched.state == WatchState.PARTIAL

    def test_composite_raises(self, catalog: Catalog) -> None:
        series_id, _, _ = add_series(catalog, {1: 1})
        with pytest.raises(UnknownMediaError):
            record_progress(series_id, 10.0, 100.0, catalog)

    def test_negative_position_is_clamped(self, movie_catalog) -> None:
        catalog, media_id = movie_catalog

        watched = record_progress(media_id, -600.0, 7200.0, catalog)

        assert watched.seconds == 0.0
        assert 0.0 <= watched.percent <= 1.0

    def test_position_beyond_duration_is_watched(self, movie_catalog) -> None:
        catalog, media_id = movie_catalog
        assert record_progress(media_id, 9000.0, 7200.0, catalog) == Watched.yes()
