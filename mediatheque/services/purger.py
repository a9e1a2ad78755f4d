"""
Detection des medias dont le fichier a disparu.

Les tests d'existence sont lances en parallele dans l'executeur par defaut
pour tolerer un stockage lent (partages reseau, disques en veille).
"""

import asyncio
from pathlib import Path
from typing import Iterable

from loguru import logger

from mediatheque.core.entities.media import MediaId


async def _is_missing(path: Path) -> bool:
    loop = asyncio.get_running_loop()
    try:
        exists = await loop.run_in_executor(None, path.exists)
    except OSError as e:
        # Fichier inaccessible : on le conserve plutot que de le retirer a tort
        logger.warning(f"Verification impossible pour {path}: {e}")
        return False
    return not exists


async def purge_media(existing: Iterable[tuple[MediaId, Path]]) -> list[MediaId]:
    """
    Retourne les identifiants dont le fichier n'existe plus.

    Fonction pure du couple (catalogue, systeme de fichiers) : aucune
    mutation n'est effectuee ici.

    Args:
        existing: Paires (id, chemin) de toutes les feuilles suivies

    Returns:
        Identifiants des medias disparus
    """
    pairs = list(existing)
    missing = await asyncio.gather(*(_is_missing(path) for _, path in pairs))
    removed = [media_id for (media_id, _), gone in zip(pairs, missing) if gone]
    if removed:
        logger.info(f"{len(removed)} media(s) disparu(s) du disque")
    return removed
