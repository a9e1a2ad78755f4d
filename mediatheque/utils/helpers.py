"""
Fonctions utilitaires partagees dans le projet Mediatheque.

- normalize_path : forme absolue normalisee d'un chemin (cle de deduplication)
- strip_invisible_chars / clean_title : nettoyage des titres venant des APIs
"""

import os
import unicodedata
from pathlib import Path


def normalize_path(path: os.PathLike | str) -> Path:
    """
    Retourne la forme absolue normalisee d'un chemin, sans acces disque.

    Les segments "." et ".." sont resolus lexicalement. Le scan utilise en plus
    Path.resolve() pour suivre les liens ; cette fonction sert a comparer
    des chemins deja canoniques ou venant du snapshot.
    """
    return Path(os.path.normpath(os.path.abspath(os.fspath(path))))


def strip_invisible_chars(text: str) -> str:
    """
    Retire les caracteres Unicode invisibles d'une chaine.

    Supprime les caracteres de controle et les marques directionnelles
    qui peuvent provenir des APIs (LRM, RLM, BOM, etc.).
    """
    result = []
    for char in text:
        category = unicodedata.category(char)
        if category in ("Cf", "Cc"):
            continue
        result.append(char)
    return "".join(result)


def clean_title(title: str) -> str:
    """Nettoie un titre : retire les caracteres invisibles et les espaces superflus."""
    if not title:
        return title
    return strip_invisible_chars(title).strip()
