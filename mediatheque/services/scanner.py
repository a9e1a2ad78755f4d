"""
Service de scan des repertoires de la videotheque.

Parcourt en largeur les repertoires configures et produit une entree
Uncategorised pour chaque nouveau fichier video. Le scan ne touche jamais
au catalogue : il ne fait que lire le systeme de fichiers.
"""

import os
import threading
from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from mediatheque.core.entities.media import Uncategorised, Video, Watched
from mediatheque.utils.constants import SUPPORTED_EXTENSIONS
from mediatheque.utils.helpers import normalize_path


def is_supported(path: Path, extensions: frozenset[str] = SUPPORTED_EXTENSIONS) -> bool:
    """Verifie l'extension du fichier (insensible a la casse)."""
    return path.suffix.lower() in extensions


def scan_file(path: Path, extensions: frozenset[str] = SUPPORTED_EXTENSIONS) -> Optional[Uncategorised]:
    """
    Cree l'entree d'un fichier video.

    Args:
        path: Chemin du fichier
        extensions: Extensions acceptees

    Returns:
        Entree Uncategorised, ou None si l'extension n'est pas supportee

    Raises:
        OSError: Si le chemin ne peut pas etre resolu
    """
    canonical = path.resolve(strict=True)
    if not is_supported(canonical, extensions):
        return None

    return Uncategorised(
        video=Video(
            path=canonical,
            watched=Watched.no(),
            added=datetime.now(),
            last_watched=None,
        ),
        dont_scrape=False,
    )


def scan_directories(
    paths: Iterable[Path],
    known_paths: Iterable[Path] = (),
    cancel: Optional[threading.Event] = None,
    extensions: frozenset[str] = SUPPORTED_EXTENSIONS,
) -> list[Uncategorised]:
    """
    Scanne les repertoires en largeur et retourne les nouveaux fichiers video.

    Une file de repertoires remplace la recursion pour supporter des
    arborescences arbitrairement profondes. Les erreurs d'entree/sortie
    sont journalisees et ignorees : elles n'interrompent jamais le scan.

    Args:
        paths: Repertoires racines a parcourir
        known_paths: Chemins deja presents dans le catalogue (ignores)
        cancel: Evenement d'annulation verifie entre deux repertoires
        extensions: Extensions video acceptees

    Returns:
        Liste des entrees Uncategorised decouvertes, sans doublon
    """
    found: list[Uncategorised] = []
    seen: set[Path] = {normalize_path(path) for path in known_paths}
    visited: set[Path] = set()

    queue: deque[Path] = deque(Path(path).expanduser() for path in paths)
    while queue:
        if cancel is not None and cancel.is_set():
            logger.info(f"Scan annule, {len(found)} fichier(s) deja trouve(s)")
            break

        directory = queue.popleft()
        try:
            resolved_dir = directory.resolve(strict=True)
        except OSError as e:
            logger.warning(f"Repertoire inaccessible {directory}: {e}")
            continue

        # Les liens symboliques peuvent former des boucles
        if resolved_dir in visited:
            continue
        visited.add(resolved_dir)

        try:
            entries = list(os.scandir(resolved_dir))
        except OSError as e:
            logger.warning(f"Lecture impossible du repertoire {resolved_dir}: {e}")
            continue

        for entry in sorted(entries, key=lambda e: e.name):
            path = Path(entry.path)
            try:
                if entry.is_dir():
                    queue.append(path)
                    continue
                media = scan_file(path, extensions)
            except OSError as e:
                logger.warning(f"Fichier ignore {path}: {e}")
                continue

            if media is None:
                logger.debug(f"Extension non supportee: {path.name}")
                continue

            if media.video.path in seen:
                continue
            seen.add(media.video.path)
            found.append(media)

    return found
