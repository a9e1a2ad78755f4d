"""
Tests unitaires de l'objet valeur DetectedMedia.
"""

import pytest

from mediatheque.core.value_objects import DetectedMedia, MediaType


class TestDetectedMedia:
    """Tests des fabriques de DetectedMedia."""

    def test_unknown(self) -> None:
        detected = DetectedMedia.unknown()
        assert detected.media_type == MediaType.UNKNOWN
        assert detected.title == ""

    def test_movie(self) -> None:
        detected = DetectedMedia.movie("the matrix", 1999)
        assert detected.media_type == MediaType.MOVIE
        assert detected.year == 1999
        assert detected.season is None

    def test_episode_exposes_series_title(self) -> None:
        detected = DetectedMedia.episode_of("show name", 2, 5)
        assert detected.media_type == MediaType.EPISODE
        assert detected.series_title == "show name"
        assert (detected.season, detected.episode) == (2, 5)

    def test_is_frozen(self) -> None:
        with pytest.raises(AttributeError):
            DetectedMedia.unknown().title = "x"  # type: ignore[misc]
