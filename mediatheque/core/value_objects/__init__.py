"""
Objets valeur immutables representant des concepts du domaine sans identite.

Exports :
- MediaType : Type de media detecte (MOVIE, EPISODE, UNKNOWN)
- DetectedMedia : Resultat de la classification d'un nom de fichier
"""

from mediatheque.core.value_objects.detected_media import DetectedMedia, MediaType

__all__ = [
    "DetectedMedia",
    "MediaType",
]
