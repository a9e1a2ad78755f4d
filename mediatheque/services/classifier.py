"""
Classification heuristique des noms de fichiers.

Devine si un nom de fichier designe un film ou un episode de serie.
La classification est "best effort" : un nom non reconnu laisse
simplement le fichier non identifie.

Les motifs d'episodes sont testes AVANT les motifs de films : un episode
dont le nom contient l'annee de la serie ne doit pas etre pris pour un film.
"""

import re

from mediatheque.core.value_objects.detected_media import DetectedMedia, MediaType

# Toute suite de caracteres non alphanumeriques devient un espace
_SEPARATORS_RE = re.compile(r"[^0-9a-zA-Z]+")

# Motifs appliques sur le nom normalise (termine par un espace)
EPISODE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(?P<title>.+?) (?P<year>\d{4}) s(?P<season>\d+)e(?P<episode>\d+) "),
    re.compile(r"^(?P<title>.+?) s(?P<season>\d+)e(?P<episode>\d+) "),
)
MOVIE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(?P<title>.+?) (?P<year>\d{4}) "),
)


def normalize_filename(filename: str) -> str:
    """
    Normalise un nom de fichier pour la classification.

    "The.Matrix.1999.1080p.mkv" -> "the matrix 1999 1080p mkv "

    Un espace final est toujours present pour que le dernier mot
    soit delimite comme les autres.
    """
    collapsed = _SEPARATORS_RE.sub(" ", filename).strip().lower()
    return f"{collapsed} "


def detect_media_type(filename: str) -> DetectedMedia:
    """
    Devine le type de media a partir d'un nom de fichier.

    Args:
        filename: Nom du fichier (sans le chemin)

    Returns:
        DetectedMedia de type EPISODE, MOVIE ou UNKNOWN (premier motif gagnant)
    """
    normalized = normalize_filename(filename)

    for pattern in EPISODE_PATTERNS:
        match = pattern.match(normalized)
        if match:
            return DetectedMedia.episode_of(
                series_title=match.group("title"),
                season=int(match.group("season")),
                episode=int(match.group("episode")),
            )

    for pattern in MOVIE_PATTERNS:
        match = pattern.match(normalized)
        if match:
            return DetectedMedia.movie(
                title=match.group("title"),
                year=int(match.group("year")),
            )

    return DetectedMedia.unknown()


def is_classified(detected: DetectedMedia) -> bool:
    return detected.media_type != MediaType.UNKNOWN
