"""
Relance des requetes HTTP vers TMDB.

Les reponses 429 (rate limiting) et les erreurs de transport (connexion
coupee, delai depasse) sont relancees avec un backoff exponentiel et du
jitter. Le header Retry-After est respecte quand il est present. Les autres
erreurs HTTP sont propagees immediatement.
"""

from typing import Optional

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

RETRYABLE_ERRORS = (httpx.TransportError,)


class RateLimitError(Exception):
    """
    Levee quand l'API repond 429 Too Many Requests.

    Attributes:
        retry_after: Secondes a attendre (header Retry-After), ou None
    """

    def __init__(self, retry_after: Optional[float] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Limite de requetes atteinte, nouvel essai dans {retry_after}s")


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


class _wait_retry_after:
    """Attente tenacity : Retry-After si fourni, sinon backoff exponentiel."""

    def __init__(self, max_wait: float) -> None:
        self._max_wait = max_wait
        self._fallback = wait_random_exponential(multiplier=1, min=1, max=max_wait)

    def __call__(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome
        error = outcome.exception() if outcome is not None else None
        if isinstance(error, RateLimitError) and error.retry_after is not None:
            return min(error.retry_after, self._max_wait)
        return self._fallback(retry_state)


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.debug(f"Requete TMDB relancee (tentative {retry_state.attempt_number}): {error}")


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 5,
    max_wait: float = 60,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP avec relance automatique.

    Args:
        client: Client httpx async
        method: Methode HTTP
        url: URL (relative a la base_url du client, ou absolue)
        max_attempts: Nombre maximum de tentatives
        max_wait: Attente maximum entre deux tentatives (secondes)
        **kwargs: Arguments passes a client.request()

    Returns:
        La reponse en cas de succes (2xx)

    Raises:
        RateLimitError: Si 429 apres epuisement des tentatives
        httpx.TransportError: Si le reseau reste inaccessible
        httpx.HTTPStatusError: Pour les autres erreurs HTTP
    """
    retrying = AsyncRetrying(
        retry=retry_if_exception_type((RateLimitError, *RETRYABLE_ERRORS)),
        wait=_wait_retry_after(max_wait),
        stop=stop_after_attempt(max_attempts),
        before_sleep=_log_retry,
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            response = await client.request(method, url, **kwargs)
            if response.status_code == 429:
                raise RateLimitError(_parse_retry_after(response.headers.get("Retry-After")))
            response.raise_for_status()
    return response
