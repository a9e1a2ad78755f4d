"""
Modeles pydantic du snapshot du catalogue.

Ces modeles representent le format JSON persiste. Ils sont distincts des
entites de domaine (dataclass dans core/entities/) selon l'architecture
hexagonale ; la conversion se fait dans les deux sens avec to_entity /
from_entity.

Format:
    {
      "media": {"<id>": {"kind": "movie", ...}},
      "next_id": 12,
      "collections": {"<id>": {"name": "...", "media": [1, 2]}},
      "next_collection_id": 3
    }
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from mediatheque.core.entities.collection import Collection
from mediatheque.core.entities.media import (
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
)

SNAPSHOT_VERSION = 1


class WatchedModel(BaseModel):
    state: WatchState = WatchState.NO
    seconds: float = 0.0
    percent: float = 0.0

    def to_entity(self) -> Watched:
        return Watched(self.state, seconds=self.seconds, fraction=self.percent)

    @classmethod
    def from_entity(cls, watched: Watched) -> WatchedModel:
        return cls(state=watched.state, seconds=watched.seconds, percent=watched.fraction)


class VideoModel(BaseModel):
    path: Path
    watched: WatchedModel = Field(default_factory=WatchedModel)
    added: datetime
    last_watched: Optional[datetime] = None

    def to_entity(self) -> Video:
        return Video(
            path=self.path,
            watched=self.watched.to_entity(),
            added=self.added,
            last_watched=self.last_watched,
        )

    @classmethod
    def from_entity(cls, video: Video) -> VideoModel:
        return cls(
            path=video.path,
            watched=WatchedModel.from_entity(video.watched),
            added=video.added,
            last_watched=video.last_watched,
        )


class MovieMetadataModel(BaseModel):
    tmdb_id: int
    title: str
    year: int
    poster: Optional[Path] = None
    released: Optional[date] = None
    overview: Optional[str] = None


class SeriesMetadataModel(BaseModel):
    tmdb_id: int
    title: str
    poster: Optional[Path] = None
    aired: Optional[date] = None
    overview: Optional[str] = None


class SeasonMetadataModel(BaseModel):
    series_tmdb_id: int
    title: str
    season: int
    poster: Optional[Path] = None
    aired: Optional[date] = None
    overview: Optional[str] = None


class EpisodeMetadataModel(BaseModel):
    series_tmdb_id: int
    title: str
    season: int
    episode: int
    aired: Optional[date] = None


class UncategorisedModel(BaseModel):
    kind: Literal["uncategorised"] = "uncategorised"
    video: VideoModel
    dont_scrape: bool = False

    def to_entity(self) -> Uncategorised:
        return Uncategorised(video=self.video.to_entity(), dont_scrape=self.dont_scrape)


class MovieModel(BaseModel):
    kind: Literal["movie"] = "movie"
    video: VideoModel
    metadata: MovieMetadataModel

    def to_entity(self) -> Movie:
        return Movie(
            video=self.video.to_entity(),
            metadata=MovieMetadata(**self.metadata.model_dump()),
        )


class SeriesModel(BaseModel):
    kind: Literal["series"] = "series"
    metadata: SeriesMetadataModel

    def to_entity(self) -> Series:
        return Series(metadata=SeriesMetadata(**self.metadata.model_dump()))


class SeasonModel(BaseModel):
    kind: Literal["season"] = "season"
    metadata: SeasonMetadataModel
    series: int

    def to_entity(self) -> Season:
        return Season(
            metadata=SeasonMetadata(**self.metadata.model_dump()),
            series=MediaId(self.series),
        )


class EpisodeModel(BaseModel):
    kind: Literal["episode"] = "episode"
    video: VideoModel
    series: int
    season: int
    metadata: EpisodeMetadataModel

    def to_entity(self) -> Episode:
        return Episode(
            video=self.video.to_entity(),
            series=MediaId(self.series),
            season=MediaId(self.season),
            metadata=EpisodeMetadata(**self.metadata.model_dump()),
        )


MediaModel = Annotated[
    Union[UncategorisedModel, MovieModel, SeriesModel, SeasonModel, EpisodeModel],
    Field(discriminator="kind"),
]


def media_to_model(media: Media) -> MediaModel:
    """Convertit une variante de media en modele de persistance."""
    if isinstance(media, Uncategorised):
        return UncategorisedModel(
            video=VideoModel.from_entity(media.video), dont_scrape=media.dont_scrape
        )
    if isinstance(media, Movie):
        return MovieModel(
            video=VideoModel.from_entity(media.video),
            metadata=MovieMetadataModel(**vars(media.metadata)),
        )
    if isinstance(media, Series):
        return SeriesModel(metadata=SeriesMetadataModel(**vars(media.metadata)))
    if isinstance(media, Season):
        return SeasonModel(
            metadata=SeasonMetadataModel(**vars(media.metadata)), series=media.series
        )
    if isinstance(media, Episode):
        return EpisodeModel(
            video=VideoModel.from_entity(media.video),
            series=media.series,
            season=media.season,
            metadata=EpisodeMetadataModel(**vars(media.metadata)),
        )
    raise TypeError(f"Variante de media inconnue: {type(media).__name__}")


class CollectionModel(BaseModel):
    name: str
    media: list[int] = Field(default_factory=list)

    def to_entity(self) -> Collection:
        return Collection(name=self.name, media={MediaId(media_id) for media_id in self.media})

    @classmethod
    def from_entity(cls, collection: Collection) -> CollectionModel:
        return cls(name=collection.name, media=sorted(collection.media))


class CatalogSnapshot(BaseModel):
    """Objet serialise unique representant tout le catalogue."""

    version: int = SNAPSHOT_VERSION
    media: dict[int, MediaModel] = Field(default_factory=dict)
    next_id: int = 1
    collections: dict[int, CollectionModel] = Field(default_factory=dict)
    next_collection_id: int = 1

    def to_parts(
        self,
    ) -> tuple[dict[MediaId, Media], int, dict[CollectionId, Collection], int]:
        media = {MediaId(media_id): model.to_entity() for media_id, model in self.media.items()}
        collections = {
            CollectionId(collection_id): model.to_entity()
            for collection_id, model in self.collections.items()
        }
        return media, self.next_id, collections, self.next_collection_id
