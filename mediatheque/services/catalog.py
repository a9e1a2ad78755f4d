"""
Catalogue : magasin d'identites des medias et des collections.

Le catalogue possede toutes les entites, indexees par des identifiants
opaques attribues de maniere monotone (jamais reutilises). C'est l'unique
source de verite : les autres composants ne manipulent que des MediaId.

Aucun verrou interne : toutes les mutations doivent passer par un seul
ecrivain (voir LibraryService).
"""

from pathlib import Path
from typing import Iterable, Iterator, Optional

from loguru import logger

from mediatheque.core.entities.collection import Collection
from mediatheque.core.entities.media import CollectionId, Media, MediaId, get_video
from mediatheque.core.exceptions import UnknownMediaError
from mediatheque.utils.helpers import normalize_path


class Catalog:
    """
    Magasin des medias et des collections.

    Attributs:
        next_id: Prochain MediaId a attribuer
        next_collection_id: Prochain CollectionId a attribuer

    Example:
        catalog = Catalog()
        media_id = catalog.insert(Uncategorised(video=Video(path=Path("/films/a.mkv"))))
        catalog.extend(scanned)
        removed = catalog.remove(media_id)
        catalog.purge_collections()
    """

    def __init__(
        self,
        media: Optional[dict[MediaId, Media]] = None,
        next_id: int = 1,
        collections: Optional[dict[CollectionId, Collection]] = None,
        next_collection_id: int = 1,
    ) -> None:
        self._media: dict[MediaId, Media] = dict(media or {})
        self._collections: dict[CollectionId, Collection] = dict(collections or {})
        # Un snapshot edite a la main ne doit jamais faire reutiliser un id
        self.next_id = max([next_id, *(media_id + 1 for media_id in self._media)])
        self.next_collection_id = max(
            [next_collection_id, *(cid + 1 for cid in self._collections)]
        )

    # Medias

    def _generate_id(self) -> MediaId:
        media_id = MediaId(self.next_id)
        self.next_id += 1
        return media_id

    def insert(self, media: Media) -> MediaId:
        """Ajoute un media et retourne son nouvel identifiant."""
        media_id = self._generate_id()
        self._media[media_id] = media
        return media_id

    def extend(self, media: Iterable[Media]) -> list[MediaId]:
        """
        Ajoute des medias en ignorant les doublons.

        Un media dont le chemin video normalise est deja connu (dans le
        catalogue ou plus tot dans le meme lot) est ignore silencieusement.

        Returns:
            Identifiants des medias effectivement ajoutes
        """
        known = self.video_paths()
        added: list[MediaId] = []
        for item in media:
            video = get_video(item)
            if video is not None:
                key = normalize_path(video.path)
                if key in known:
                    logger.debug(f"Doublon ignore: {video.path}")
                    continue
                known.add(key)
            added.append(self.insert(item))
        return added

    def remove(self, media_id: MediaId) -> Optional[Media]:
        """
        Retire un media et le retourne (None si inconnu).

        L'appelant doit ensuite appeler purge_collections().
        """
        return self._media.pop(media_id, None)

    def get(self, media_id: MediaId) -> Optional[Media]:
        return self._media.get(media_id)

    def replace(self, media_id: MediaId, media: Media) -> None:
        """
        Remplace la variante d'un media existant en conservant son identifiant.

        Raises:
            UnknownMediaError: Si l'identifiant n'existe pas
        """
        if media_id not in self._media:
            raise UnknownMediaError(media_id)
        self._media[media_id] = media

    def items(self) -> Iterator[tuple[MediaId, Media]]:
        return iter(list(self._media.items()))

    def video_paths(self) -> set[Path]:
        """Chemins normalises de toutes les videos suivies."""
        paths: set[Path] = set()
        for media in self._media.values():
            video = get_video(media)
            if video is not None:
                paths.add(normalize_path(video.path))
        return paths

    def __contains__(self, media_id: object) -> bool:
        return media_id in self._media

    def __iter__(self) -> Iterator[MediaId]:
        return iter(list(self._media))

    def __len__(self) -> int:
        return len(self._media)

    # Collections

    def insert_collection(self, collection: Collection) -> CollectionId:
        collection_id = CollectionId(self.next_collection_id)
        self.next_collection_id += 1
        self._collections[collection_id] = collection
        return collection_id

    def remove_collection(self, collection_id: CollectionId) -> Optional[Collection]:
        return self._collections.pop(collection_id, None)

    def collection(self, collection_id: CollectionId) -> Optional[Collection]:
        return self._collections.get(collection_id)

    def collections(self) -> Iterator[tuple[CollectionId, Collection]]:
        return iter(list(self._collections.items()))

    def purge_collections(self) -> int:
        """
        Retire des collections les membres qui ne designent plus un media vivant.

        Doit etre appele apres toute suppression de media.

        Returns:
            Nombre total de membres retires
        """
        purged = sum(
            collection.purge_by(lambda media_id: media_id in self._media)
            for collection in self._collections.values()
        )
        if purged:
            logger.info(f"{purged} reference(s) orpheline(s) retiree(s) des collections")
        return purged
