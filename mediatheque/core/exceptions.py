"""
Exceptions du domaine.

Seules les erreurs d'ecriture du snapshot representent un risque de perte
de donnees et remontent jusqu'a l'utilisateur. Les echecs de scan et de
scraping sont absorbes localement.
"""

from typing import Optional


class MediathequeError(RuntimeError):
    """Erreur de base du catalogue."""


class UnknownMediaError(MediathequeError, KeyError):
    """Le MediaId ne designe aucune entite vivante."""

    def __init__(self, media_id: int) -> None:
        self.media_id = media_id
        super().__init__(f"Media introuvable: {media_id}")

    def __str__(self) -> str:
        return self.args[0]


class UnknownCollectionError(MediathequeError, KeyError):
    """Le CollectionId ne designe aucune collection."""

    def __init__(self, collection_id: int) -> None:
        self.collection_id = collection_id
        super().__init__(f"Collection introuvable: {collection_id}")

    def __str__(self) -> str:
        return self.args[0]


class SnapshotSaveError(MediathequeError):
    """
    Echec d'ecriture du snapshot du catalogue.

    Attributes:
        path: Chemin du fichier qui n'a pas pu etre ecrit
    """

    def __init__(self, path: object, reason: Optional[str] = None) -> None:
        self.path = path
        message = f"Impossible d'enregistrer le catalogue dans {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
