"""
Constantes globales pour Mediatheque.

Ce module contient les constantes utilisees dans l'application:
- Extensions video supportees par le scan
- Tolerance de calcul des progressions agregees
- Noms de fichiers du stockage
"""

# Extensions video reconnues (comparaison insensible a la casse)
SUPPORTED_EXTENSIONS = frozenset({
    ".mkv",
    ".mp4",
})

# Tolerance pour classer une moyenne de progression en NO / YES
WATCHED_EPSILON = 1e-6

# Snapshot du catalogue dans le repertoire de stockage
SNAPSHOT_FILENAME = "library.json"

# Sous-repertoire des posters telecharges
POSTERS_DIRNAME = "posters"

# Fenetre "ajoutes recemment" (en jours)
RECENTLY_ADDED_DAYS = 7
