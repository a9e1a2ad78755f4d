"""
Tests unitaires de l'agregation du scraping.

Tests couvrant:
- find_or_fetch : recherche, production unique, memorisation des echecs
- scrape_all : films, regroupement des episodes par serie, erreurs isolees,
  timeout, annulation
"""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from mediatheque.core.entities import MediaId
from mediatheque.services.scrape import PendingSeason, PendingSeries, find_or_fetch, scrape_all
from tests.fixtures.factories import (
    episode_metadata,
    movie_metadata,
    season_metadata,
    series_metadata,
)

STORAGE = Path("/storage")


def _season(number: int, episodes: int, series_tmdb_id: int = 1396):
    return (
        season_metadata(number, series_tmdb_id),
        [episode_metadata(number, n, series_tmdb_id=series_tmdb_id) for n in range(1, episodes + 1)],
    )


class TestFindOrFetch:
    """Tests du combinateur de creation paresseuse memorisee."""

    @pytest.mark.asyncio
    async def test_returns_existing_without_fetching(self) -> None:
        items = ["a", "b"]
        fetch = AsyncMock(return_value="c")

        found = await find_or_fetch(items, lambda x: x == "b", fetch, set(), "b")

        assert found == "b"
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_appends_fetched_item(self) -> None:
        items: list[str] = []
        fetch = AsyncMock(return_value="a")

        assert await find_or_fetch(items, lambda x: x == "a", fetch, set(), "a") == "a"
        assert await find_or_fetch(items, lambda x: x == "a", fetch, set(), "a") == "a"

        assert items == ["a"]
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failing_producer_runs_once(self) -> None:
        items: list[str] = []
        misses: set = set()
        fetch = AsyncMock(return_value=None)

        for _ in range(3):
            assert await find_or_fetch(items, lambda x: x == "a", fetch, misses, "a") is None

        assert items == []
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_exception_is_folded_into_miss(self) -> None:
        misses: set = set()
        fetch = AsyncMock(side_effect=RuntimeError("reseau"))

        assert await find_or_fetch([], lambda x: True, fetch, misses, "k") is None
        assert "k" in misses


class TestScrapeMovies:
    """Tests du scraping des films."""

    @pytest.mark.asyncio
    async def test_movie_is_resolved(self, mock_scraper: AsyncMock) -> None:
        metadata = movie_metadata(42, "Foo", 2020)
        mock_scraper.scrape_movie.return_value = metadata

        result = await scrape_all(mock_scraper, STORAGE, [(MediaId(1), "Foo.2020.mkv")])

        assert result.movies == [(MediaId(1), metadata)]
        mock_scraper.scrape_movie.assert_awaited_once_with(STORAGE, "foo", 2020)

    @pytest.mark.asyncio
    async def test_unknown_names_are_not_looked_up(self, mock_scraper: AsyncMock) -> None:
        result = await scrape_all(mock_scraper, STORAGE, [(MediaId(1), "holiday.mp4")])

        assert result.resolved_count == 0
        mock_scraper.scrape_movie.assert_not_awaited()
        mock_scraper.scrape_series.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failing_lookup_only_affects_its_item(self, mock_scraper: AsyncMock) -> None:
        async def scrape_movie(storage_dir, title, year):
            if title == "bad":
                raise RuntimeError("HTTP 500")
            return movie_metadata(7, title, year)

        mock_scraper.scrape_movie.side_effect = scrape_movie

        result = await scrape_all(
            mock_scraper,
            STORAGE,
            [(MediaId(1), "Bad.2001.mkv"), (MediaId(2), "Good.2002.mkv")],
        )

        assert [media_id for media_id, _ in result.movies] == [MediaId(2)]

    @pytest.mark.asyncio
    async def test_timeout_is_a_miss(self, mock_scraper: AsyncMock) -> None:
        async def slow(storage_dir, title, year):
            await asyncio.sleep(5)
            return movie_metadata()

        mock_scraper.scrape_movie.side_effect = slow

        result = await scrape_all(
            mock_scraper, STORAGE, [(MediaId(1), "Foo.2020.mkv")], timeout=0.01
        )

        assert result.movies == []

    @pytest.mark.asyncio
    async def test_cancelled_batch_does_nothing(self, mock_scraper: AsyncMock) -> None:
        cancel = asyncio.Event()
        cancel.set()

        result = await scrape_all(
            mock_scraper,
            STORAGE,
            [(MediaId(1), "Foo.2020.mkv"), (MediaId(2), "Show.S01E01.mkv")],
            cancel=cancel,
        )

        assert result.resolved_count == 0
        mock_scraper.scrape_movie.assert_not_awaited()
        mock_scraper.scrape_series.assert_not_awaited()
        assert sorted(result.skipped) == [MediaId(1), MediaId(2)]


class TestScrapeEpisodes:
    """Tests du scraping des episodes."""

    @pytest.mark.asyncio
    async def test_series_and_season_fetched_once(self, mock_scraper: AsyncMock) -> None:
        mock_scraper.scrape_series.return_value = series_metadata(1396, "Show")
        mock_scraper.scrape_season.return_value = _season(1, 3)

        result = await scrape_all(
            mock_scraper,
            STORAGE,
            [
                (MediaId(1), "Show.S01E01.mkv"),
                (MediaId(2), "Show.S01E02.mkv"),
                (MediaId(3), "Show.S01E03.mkv"),
            ],
        )

        mock_scraper.scrape_series.assert_awaited_once_with(STORAGE, "show")
        mock_scraper.scrape_season.assert_awaited_once_with(STORAGE, 1396, 1)
        assert len(result.series) == 1
        pending: PendingSeries = result.series[0]
        assert pending.query == "show"
        assert len(pending.seasons) == 1
        season: PendingSeason = pending.seasons[0]
        assert [media_id for media_id, _ in season.episodes] == [MediaId(1), MediaId(2), MediaId(3)]
        assert season.unmatched == []

    @pytest.mark.asyncio
    async def test_matched_episode_leaves_unmatched(self, mock_scraper: AsyncMock) -> None:
        mock_scraper.scrape_series.return_value = series_metadata(1396, "Show")
        mock_scraper.scrape_season.return_value = _season(1, 3)

        result = await scrape_all(mock_scraper, STORAGE, [(MediaId(1), "Show.S01E02.mkv")])

        season = result.series[0].seasons[0]
        assert [metadata.episode for _, metadata in season.episodes] == [2]
        assert [metadata.episode for metadata in season.unmatched] == [1, 3]

    @pytest.mark.asyncio
    async def test_one_season_lookup_per_season(self, mock_scraper: AsyncMock) -> None:
        mock_scraper.scrape_series.return_value = series_metadata(1396, "Show")
        mock_scraper.scrape_season.side_effect = lambda storage, tmdb_id, n: _season(n, 2)

        result = await scrape_all(
            mock_scraper,
            STORAGE,
            [
                (MediaId(1), "Show.S01E01.mkv"),
                (MediaId(2), "Show.S02E01.mkv"),
                (MediaId(3), "Show.S01E02.mkv"),
            ],
        )

        assert mock_scraper.scrape_season.await_count == 2
        seasons = {season.metadata.season: season for season in result.series[0].seasons}
        assert sorted(seasons) == [1, 2]
        assert len(seasons[1].episodes) == 2

    @pytest.mark.asyncio
    async def test_missing_series_is_not_retried_in_batch(self, mock_scraper: AsyncMock) -> None:
        result = await scrape_all(
            mock_scraper,
            STORAGE,
            [(MediaId(1), "Nope.S01E01.mkv"), (MediaId(2), "Nope.S01E02.mkv")],
        )

        assert result.series == []
        mock_scraper.scrape_series.assert_awaited_once()
        mock_scraper.scrape_season.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_season_skips_only_its_episodes(self, mock_scraper: AsyncMock) -> None:
        mock_scraper.scrape_series.return_value = series_metadata(1396, "Show")
        mock_scraper.scrape_season.side_effect = (
            lambda storage, tmdb_id, n: _season(n, 2) if n == 1 else None
        )

        result = await scrape_all(
            mock_scraper,
            STORAGE,
            [
                (MediaId(1), "Show.S09E01.mkv"),
                (MediaId(2), "Show.S09E02.mkv"),
                (MediaId(3), "Show.S01E01.mkv"),
            ],
        )

        assert mock_scraper.scrape_season.await_count == 2
        season = result.series[0].seasons[0]
        assert season.metadata.season == 1
        assert season.episodes[0][0] == MediaId(3)
