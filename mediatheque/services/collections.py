"""
Gestion des collections utilisateur.

Une collection ne reference que des medias vivants : l'ajout d'un id
inconnu est refuse, et toute suppression de media doit etre suivie de
Catalog.purge_collections().
"""

from typing import Optional

from loguru import logger

from mediatheque.core.entities.collection import DEFAULT_COLLECTION_NAME, Collection
from mediatheque.core.entities.media import CollectionId, MediaId
from mediatheque.core.exceptions import UnknownCollectionError, UnknownMediaError
from mediatheque.services.catalog import Catalog


def _get(catalog: Catalog, collection_id: CollectionId) -> Collection:
    collection = catalog.collection(collection_id)
    if collection is None:
        raise UnknownCollectionError(collection_id)
    return collection


def create_collection(catalog: Catalog, name: Optional[str] = None) -> CollectionId:
    """Cree une collection vide et retourne son identifiant."""
    collection_id = catalog.insert_collection(
        Collection(name=(name or "").strip() or DEFAULT_COLLECTION_NAME)
    )
    logger.info(f"Collection creee: {collection_id}")
    return collection_id


def rename_collection(catalog: Catalog, collection_id: CollectionId, name: str) -> None:
    """
    Renomme une collection.

    Raises:
        UnknownCollectionError: Si la collection n'existe pas
    """
    _get(catalog, collection_id).name = name.strip() or DEFAULT_COLLECTION_NAME


def delete_collection(catalog: Catalog, collection_id: CollectionId) -> Collection:
    """
    Supprime une collection (les medias ne sont pas touches).

    Raises:
        UnknownCollectionError: Si la collection n'existe pas
    """
    collection = catalog.remove_collection(collection_id)
    if collection is None:
        raise UnknownCollectionError(collection_id)
    return collection


def toggle_membership(
    catalog: Catalog, collection_id: CollectionId, media_id: MediaId
) -> bool:
    """
    Ajoute le media a la collection, ou l'en retire s'il y etait deja.

    Returns:
        True si le media est membre apres l'operation

    Raises:
        UnknownCollectionError: Si la collection n'existe pas
        UnknownMediaError: Si le media n'est pas vivant (ajout seulement)
    """
    collection = _get(catalog, collection_id)
    if media_id in collection:
        collection.remove(media_id)
        return False
    if media_id not in catalog:
        raise UnknownMediaError(media_id)
    collection.insert(media_id)
    return True


def collections_containing(catalog: Catalog, media_id: MediaId) -> list[CollectionId]:
    return [
        collection_id
        for collection_id, collection in catalog.collections()
        if media_id in collection
    ]
