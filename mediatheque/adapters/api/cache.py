"""
Cache persistant des reponses TMDB.

Les reponses JSON brutes sont conservees sur disque avec diskcache, ce qui
evite de refaire les memes recherches a chaque rafraichissement.

TTL :
- Recherches (SEARCH_TTL) : 24 heures, les resultats evoluent
- Saisons (DETAILS_TTL) : 7 jours, la liste des episodes change rarement
"""

import asyncio
from functools import partial
from pathlib import Path
from typing import Any, Optional, Union

from diskcache import Cache


def make_key(*parts: object) -> str:
    """Construit une cle de cache : make_key("tmdb", "movie", "alien", 1979)."""
    return ":".join(str(part).lower() for part in parts)


class APICache:
    """
    Cache asynchrone au-dessus de diskcache.

    Les operations disque passent par run_in_executor pour ne pas bloquer
    la boucle d'evenements pendant un scraping concurrent.

    Example:
        cache = APICache(Path("~/.cache/mediatheque"))
        await cache.set(make_key("tmdb", "tv", "dark"), payload, APICache.SEARCH_TTL)
        payload = await cache.get(make_key("tmdb", "tv", "dark"))
    """

    SEARCH_TTL = 24 * 60 * 60
    DETAILS_TTL = 7 * 24 * 60 * 60

    def __init__(self, cache_dir: Union[str, Path]) -> None:
        self._cache = Cache(str(Path(cache_dir).expanduser()))

    async def get(self, key: str) -> Optional[Any]:
        """Retourne la valeur stockee, None si absente ou expiree."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, partial(self._cache.set, key, value, expire=ttl))

    def close(self) -> None:
        self._cache.close()
