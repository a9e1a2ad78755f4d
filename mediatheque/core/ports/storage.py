"""
Interface port pour la persistance du catalogue.

Le catalogue est persiste en un seul objet serialise (snapshot).
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mediatheque.services.catalog import Catalog


class ICatalogStorage(ABC):
    """
    Contrat de chargement/sauvegarde du catalogue.

    Le chargement ne leve jamais : un fichier absent ou illisible donne un
    catalogue vide (le fichier illisible est conserve a cote).
    La sauvegarde leve SnapshotSaveError en cas d'echec.
    """

    @abstractmethod
    def load(self) -> "Catalog":
        """Charge le catalogue, ou un catalogue vide."""
        ...

    @abstractmethod
    def save(self, catalog: "Catalog") -> None:
        """Enregistre le catalogue."""
        ...
