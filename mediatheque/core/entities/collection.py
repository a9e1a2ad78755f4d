"""
Entite collection.

Une collection est un sous-ensemble nomme du catalogue defini par
l'utilisateur. Elle ne possede pas ses medias : elle ne fait que
referencer leurs MediaId, qui doivent rester vivants.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterator

from mediatheque.core.entities.media import MediaId

DEFAULT_COLLECTION_NAME = "Collection sans titre"


@dataclass
class Collection:
    """
    Collection de medias definie par l'utilisateur.

    Attributs :
        name : Nom affiche
        media : Ensemble non ordonne des MediaId membres
    """

    name: str = DEFAULT_COLLECTION_NAME
    media: set[MediaId] = field(default_factory=set)

    def purge_by(self, keep: Callable[[MediaId], bool]) -> int:
        """
        Retire les membres pour lesquels keep() retourne False.

        Returns:
            Nombre de membres retires
        """
        before = len(self.media)
        self.media = {media_id for media_id in self.media if keep(media_id)}
        return before - len(self.media)

    def insert(self, media_id: MediaId) -> bool:
        """Ajoute un membre. Retourne False s'il etait deja present."""
        if media_id in self.media:
            return False
        self.media.add(media_id)
        return True

    def remove(self, media_id: MediaId) -> bool:
        """Retire un membre. Retourne False s'il etait absent."""
        if media_id not in self.media:
            return False
        self.media.discard(media_id)
        return True

    def __contains__(self, media_id: object) -> bool:
        return media_id in self.media

    def __iter__(self) -> Iterator[MediaId]:
        return iter(self.media)

    def __len__(self) -> int:
        return len(self.media)
