"""
Utilitaires partages pour les commandes CLI.

- console : instance Rich Console partagee
- suppress_loguru : desactive les logs loguru pendant un affichage Rich
- open_library : context manager fournissant le service de mediatheque
- run_async : execute une operation async puis ferme le scraper
- exit_on_error : convertit les erreurs metier en message + code de sortie 1
"""

import asyncio
from contextlib import contextmanager
from typing import Awaitable, Iterator, TypeVar

import typer
from loguru import logger as loguru_logger
from rich.console import Console

from mediatheque.container import Container
from mediatheque.core.exceptions import MediathequeError
from mediatheque.services.library import LibraryService

T = TypeVar("T")

console = Console()


@contextmanager
def suppress_loguru():
    """
    Desactive les logs loguru pendant l'affichage Rich.

    Usage:
        with suppress_loguru():
            console.print(...)
    """
    loguru_logger.disable("mediatheque")
    try:
        yield
    finally:
        loguru_logger.enable("mediatheque")


@contextmanager
def open_library() -> Iterator[LibraryService]:
    """
    Fournit un LibraryService construit par le container.

    Usage:
        with open_library() as service:
            service.set_watched(MediaId(3), True)
            service.save()
    """
    container = Container()
    service = container.library_service()
    try:
        yield service
    finally:
        container.api_cache().close()


def run_async(service: LibraryService, operation: Awaitable[T]) -> T:
    """
    Execute une operation async du service avec asyncio.run().

    Le scraper est ferme dans la meme boucle d'evenements.
    """

    async def _run() -> T:
        try:
            return await operation
        finally:
            await service.close()

    return asyncio.run(_run())


@contextmanager
def exit_on_error():
    """Affiche une MediathequeError en rouge et termine avec le code 1."""
    try:
        yield
    except MediathequeError as e:
        console.print(f"[red]Erreur: {e}[/red]")
        raise typer.Exit(1) from e
